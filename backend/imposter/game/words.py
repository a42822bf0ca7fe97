from __future__ import annotations

import random
from dataclasses import dataclass


@dataclass(frozen=True)
class WordEntry:
    word: str
    decoy: str
    hint: str


def _entries(*rows: tuple[str, str, str]) -> list[WordEntry]:
    return [WordEntry(word=w, decoy=d, hint=h) for w, d, h in rows]


WORDS: dict[str, list[WordEntry]] = {
    "Places": _entries(
        ("Beach", "Desert", "Natural outdoor location"),
        ("Airport", "Railway Station", "Travel hub"),
        ("Mountain", "Hill", "Elevated landform"),
        ("Library", "Museum", "Public building for knowledge"),
        ("Restaurant", "Cafe", "Place to eat"),
        ("Hospital", "Clinic", "Medical facility"),
        ("Park", "Garden", "Outdoor recreation area"),
        ("School", "University", "Educational institution"),
    ),
    "Movies": _entries(
        ("Inception", "Interstellar", "Christopher Nolan film"),
        ("Titanic", "Poseidon", "Disaster movie on water"),
        ("Jaws", "The Meg", "Ocean creature thriller"),
        ("Avatar", "Valerian", "Sci-fi visual spectacle"),
        ("The Matrix", "Ready Player One", "Virtual reality film"),
        ("Frozen", "Tangled", "Disney animated musical"),
    ),
    "Food": _entries(
        ("Pizza", "Burger", "Fast food item"),
        ("Sushi", "Sashimi", "Japanese cuisine"),
        ("Pasta", "Noodles", "Grain-based dish"),
        ("Taco", "Burrito", "Mexican food"),
        ("Cake", "Pie", "Baked dessert"),
        ("Ice Cream", "Frozen Yogurt", "Cold dessert"),
    ),
    "Animals": _entries(
        ("Lion", "Tiger", "Big cat"),
        ("Elephant", "Rhino", "Large land mammal"),
        ("Dolphin", "Whale", "Marine mammal"),
        ("Eagle", "Hawk", "Bird of prey"),
        ("Snake", "Lizard", "Reptile"),
        ("Butterfly", "Moth", "Flying insect"),
    ),
    "Sports": _entries(
        ("Basketball", "Volleyball", "Team ball sport"),
        ("Tennis", "Badminton", "Racket sport"),
        ("Soccer", "Hockey", "Field team sport"),
        ("Swimming", "Diving", "Water sport"),
        ("Boxing", "Wrestling", "Combat sport"),
        ("Golf", "Cricket", "Sport with a ball and stick"),
    ),
}

CATEGORIES: list[str] = list(WORDS.keys())


def is_category(name: str) -> bool:
    return name in WORDS


def pick_entry(category: str, rng: random.Random | None = None) -> WordEntry:
    r = rng or random
    return r.choice(WORDS[category])
