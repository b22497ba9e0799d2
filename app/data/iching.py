import json
import os

DATA_DIR = os.path.dirname(os.path.abspath(__file__))

hexagrams = []
trigrams = {}


def load_iching_data(filepath=os.path.join(DATA_DIR, "iching_data.json")):
    """
    Load hexagrams and trigrams. Only part of the 64 hexagrams is tabulated, so every
    lookup that derives an index has to wrap around len(hexagrams).
    """
    with open(filepath, "r", encoding="utf-8") as f:
        data = json.load(f)

    hexagrams[:] = data["hexagrams"]
    trigrams.clear()
    trigrams.update(data["trigrams"])
    return hexagrams


def get_hexagram_by_index(index: int):
    return hexagrams[index % len(hexagrams)]


def get_hexagram_by_id(number: int):
    for hexagram in hexagrams:
        if hexagram["number"] == number:
            return hexagram
    return None



load_iching_data()
