"""
Verifier numbers of the challenges in the game booklet.

Challenge n is BOOKLET_CHALLENGES[n - 1].
"""

BOOKLET_CHALLENGES: list[list[int]] = [
    [4, 9, 11, 14],
    [3, 7, 10, 14],
    [4, 9, 13, 17],
    [3, 8, 15, 16],
    [2, 6, 14, 17],
    [2, 7, 10, 13],
    [8, 12, 15, 17],
    [3, 5, 9, 15, 16],
    [1, 7, 10, 12, 17],
    [2, 6, 8, 12, 15],
    [5, 10, 11, 15, 17],
    [4, 9, 18, 20],
    [11, 16, 19, 21],
    [2, 13, 17, 20],
    [5, 14, 18, 19, 20],
    [2, 7, 12, 16, 19, 22],
    [21, 31, 37, 39],
    [23, 28, 41, 48],
    [19, 24, 30, 31, 38],
    [11, 22, 30, 33, 34, 40],
]


def challenge(number: int) -> list[int]:
    """
    Verifier numbers of booklet challenge `number` (1-based).

    Raises:
        ValueError: If there is no such challenge
    """
    if not 1 <= number <= len(BOOKLET_CHALLENGES):
        raise ValueError(f"Challenge must be in [1, {len(BOOKLET_CHALLENGES)}], got {number}")
    return list(BOOKLET_CHALLENGES[number - 1])
