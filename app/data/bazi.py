import json
import os

DATA_DIR = os.path.dirname(os.path.abspath(__file__))

heavenly_stems = []
earthly_branches = []
generates = {}
controls = {}
element_characteristics = {}

FIVE_ELEMENTS = ("木", "火", "土", "金", "水")


def load_bazi_data(filepath=os.path.join(DATA_DIR, "bazi_data.json")):
    """
    Load heavenly stems, earthly branches and the five-element cycles.
    Stem and branch lists are indexed by their cyclic position (甲 = 0, 子 = 0).
    """
    with open(filepath, "r", encoding="utf-8") as f:
        data = json.load(f)

    heavenly_stems[:] = sorted(data["heavenly_stems"], key=lambda stem: stem["id"])
    earthly_branches[:] = sorted(data["earthly_branches"], key=lambda branch: branch["id"])

    generates.clear()
    generates.update(data["element_relations"]["generates"])
    controls.clear()
    controls.update(data["element_relations"]["controls"])

    element_characteristics.clear()
    for element, info in data["element_characteristics"].items():
        element_characteristics[element] = {
            "positive": tuple(info["positive"]),
            "negative": tuple(info["negative"]),
            "description": info["description"],
        }


load_bazi_data()
