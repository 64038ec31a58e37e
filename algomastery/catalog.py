"""Starter problems for a fresh database."""

from algomastery.db.database import Database
from algomastery.db.models import Difficulty, Problem
from algomastery.review.dates import LocalClock

SEED_PROBLEMS = [
    {"id": "two-sum", "title": "Two Sum", "topic": "arrays-hashing", "difficulty": Difficulty.EASY},
    {"id": "group-anagrams", "title": "Group Anagrams", "topic": "arrays-hashing", "difficulty": Difficulty.MEDIUM},
    {"id": "valid-palindrome", "title": "Valid Palindrome", "topic": "two-pointers", "difficulty": Difficulty.EASY},
    {"id": "3sum", "title": "3Sum", "topic": "two-pointers", "difficulty": Difficulty.MEDIUM},
    {
        "id": "longest-substring-without-repeating-characters",
        "title": "Longest Substring Without Repeating Characters",
        "topic": "sliding-window",
        "difficulty": Difficulty.MEDIUM,
    },
    {"id": "valid-parentheses", "title": "Valid Parentheses", "topic": "stack", "difficulty": Difficulty.EASY},
    {"id": "binary-search", "title": "Binary Search", "topic": "binary-search", "difficulty": Difficulty.EASY},
    {"id": "reverse-linked-list", "title": "Reverse Linked List", "topic": "linked-list", "difficulty": Difficulty.EASY},
    {"id": "invert-binary-tree", "title": "Invert Binary Tree", "topic": "trees", "difficulty": Difficulty.EASY},
    {"id": "number-of-islands", "title": "Number of Islands", "topic": "graphs", "difficulty": Difficulty.MEDIUM},
    {"id": "climbing-stairs", "title": "Climbing Stairs", "topic": "dynamic-programming", "difficulty": Difficulty.EASY},
    {"id": "merge-intervals", "title": "Merge Intervals", "topic": "intervals", "difficulty": Difficulty.MEDIUM},
]


def seed_database(db: Database, clock: LocalClock | None = None) -> int:
    """Add the starter problems that are not already present. Returns how many were added."""
    clock = clock or LocalClock()
    now = clock.now()
    existing = db.get_problems(item["id"] for item in SEED_PROBLEMS)

    added = 0
    with db.transaction() as tx:
        for item in SEED_PROBLEMS:
            if item["id"] in existing:
                continue
            tx.add_problem(
                Problem(
                    url=f"https://leetcode.com/problems/{item['id']}/",
                    created_at=now,
                    updated_at=now,
                    **item,
                )
            )
            added += 1
    return added
