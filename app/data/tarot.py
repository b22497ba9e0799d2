import json
import os

DATA_DIR = os.path.dirname(os.path.abspath(__file__))

tarot_cards = []
tarot_cards_by_id = {}


def load_tarot_data(filepath=os.path.join(DATA_DIR, "tarot_cards.json")):
    """
    Load the tarot deck from JSON. Cards keep the file order, which is the order the
    shuffle starts from.
    """
    with open(filepath, "r", encoding="utf-8") as f:
        data = json.load(f)

    tarot_cards.clear()
    tarot_cards_by_id.clear()
    for card in data["cards"]:
        entry = {
            "id": card["id"],
            "name": card["name"],
            "name_en": card["name_en"],
            "suit": card["suit"],
            "upright": {
                "keywords": tuple(card["upright"]["keywords"]),
                "meaning": card["upright"]["meaning"],
            },
            "reversed": {
                "keywords": tuple(card["reversed"]["keywords"]),
                "meaning": card["reversed"]["meaning"],
            },
        }
        tarot_cards.append(entry)
        tarot_cards_by_id[entry["id"]] = entry
    return tarot_cards


def get_card_by_id(card_id: int):
    return tarot_cards_by_id.get(card_id)


load_tarot_data()
