"""Lexical judge deciding whether a free-text guess names the answer."""

SIMILARITY_THRESHOLD = 0.75
WORD_SIMILARITY_THRESHOLD = 0.8
# Answer words must be longer than this to count towards partial credit
IMPORTANT_WORD_MIN_LENGTH = 3


def string_similarity(first: str, second: str, substring_length: int = 2) -> float:
    """Dice coefficient over character n-grams (bigrams by default).

    Returns a value in [0, 1]. Strings shorter than ``substring_length``
    share no n-grams and score 0.
    """
    first = first.lower()
    second = second.lower()
    if len(first) < substring_length or len(second) < substring_length:
        return 0.0

    counts = {}
    for i in range(len(first) - substring_length + 1):
        gram = first[i:i + substring_length]
        counts[gram] = counts.get(gram, 0) + 1

    matches = 0
    for j in range(len(second) - substring_length + 1):
        gram = second[j:j + substring_length]
        if counts.get(gram, 0) > 0:
            counts[gram] -= 1
            matches += 1

    return (matches * 2) / (len(first) + len(second) - (substring_length - 1) * 2)


def normalize(text: str) -> str:
    return (text or '').lower().strip()


def is_close_enough_match(correct_answer: str, player_guess: str) -> bool:
    """Judge a guess against the admin's answer.

    Checks run in order and the first one that passes wins: exact match,
    containment either way ("cake" vs "birthday cake"), overall similarity,
    a trailing "s" plural, and finally partial credit when a long word of a
    multi-word answer closely matches any word of the guess.
    """
    answer = normalize(correct_answer)
    guess = normalize(player_guess)
    if not answer or not guess:
        return False

    if guess == answer:
        return True

    if answer in guess or guess in answer:
        return True

    if string_similarity(answer, guess) >= SIMILARITY_THRESHOLD:
        return True

    if answer + 's' == guess or guess + 's' == answer:
        return True

    answer_words = answer.split()
    if len(answer_words) > 1:
        guess_words = guess.split()
        important = [w for w in answer_words if len(w) > IMPORTANT_WORD_MIN_LENGTH]
        for word in important:
            if any(string_similarity(word, g) > WORD_SIMILARITY_THRESHOLD for g in guess_words):
                return True

    return False
