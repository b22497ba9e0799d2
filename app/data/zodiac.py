import json
import os

DATA_DIR = os.path.dirname(os.path.abspath(__file__))

zodiac_signs = []


def load_zodiac_data(filepath=os.path.join(DATA_DIR, "zodiac_signs.json")):
    """Load the twelve western zodiac signs in calendar order, starting from Aries."""
    with open(filepath, "r", encoding="utf-8") as f:
        data = json.load(f)

    zodiac_signs.clear()
    for sign in data["signs"]:
        start = sign["date_range"]["start"]
        end = sign["date_range"]["end"]
        zodiac_signs.append({
            "id": sign["id"],
            "name": sign["name"],
            "name_en": sign["name_en"],
            "element": sign["element"],
            "quality": sign["quality"],
            "ruling_planet": sign["ruling_planet"],
            "date_range": {
                "start": (start["month"], start["day"]),
                "end": (end["month"], end["day"]),
            },
            "traits": {
                "positive": tuple(sign["traits"]["positive"]),
                "negative": tuple(sign["traits"]["negative"]),
            },
            "description": sign["description"],
            "compatibility": {
                "best": tuple(sign["compatibility"]["best"]),
                "challenging": tuple(sign["compatibility"]["challenging"]),
            },
        })
    return zodiac_signs


def get_sign_by_name(name: str):
    for sign in zodiac_signs:
        if name in (sign["name"], sign["name_en"]):
            return sign
    return None


load_zodiac_data()
