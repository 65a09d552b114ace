from collections import Counter

def remaining_words(solutions, found) -> list:
    found = set(found)
    return [w for w in solutions if w not in found]

def start_letter_counts(solutions, letters) -> dict:
    """How many solutions start with each puzzle letter (letters with none included as 0)."""
    counts = {letter: 0 for letter in letters}
    for word in solutions:
        if word[:1] in counts:
            counts[word[0]] += 1
    return counts

def length_counts(words) -> dict:
    """Word length -> number of words, sorted by length."""
    return dict(sorted(Counter(len(w) for w in words).items()))

def len7_plus_count(solutions) -> int:
    return sum(1 for w in solutions if len(w) >= 7)
