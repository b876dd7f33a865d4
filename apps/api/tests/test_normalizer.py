import pytest

from chat.normalizer import normalize

SAMPLES = [
    "",
    "   ",
    "\n\t ",
    "Hello world.",
    "Hello   world  .",
    "Take a breath.Then relax ,okay ?",
    "I don ' t know",
    "a well - being practice",
    "She said \" breathe \" softly",
    "Try this ( just once )please",
    "Wait... really?!",
    "It costs 3.50 at 10:30 today",
    "Mixed.( punct ) - 'quotes' ,; done",
    "  leading and trailing  ",
    "Ünïcode.Wörds , too",
]


@pytest.mark.parametrize("text", SAMPLES)
def test_normalize_is_idempotent(text):
    once = normalize(text)
    assert normalize(once) == once


@pytest.mark.parametrize("text", [None, "", "    ", "\n\n"])
def test_normalize_empty_input_gives_empty_string(text):
    assert normalize(text) == ""


def test_collapses_whitespace_and_trims():
    assert normalize("  breathe \n\n in   slowly  ") == "breathe in slowly"


def test_no_space_before_punctuation():
    assert normalize("Hello world .") == "Hello world."
    assert normalize("Really ? Yes !") == "Really? Yes!"


def test_one_space_after_punctuation():
    assert normalize("Breathe in.Breathe out.") == "Breathe in. Breathe out."
    assert normalize("calm,steady;present") == "calm, steady; present"


def test_numbers_and_ellipses_are_left_alone():
    assert normalize("3.5 minutes at 10:30") == "3.5 minutes at 10:30"
    assert normalize("Hmm... okay") == "Hmm... okay"


def test_joiners_lose_surrounding_spaces():
    assert normalize("don ' t") == "don't"
    assert normalize("self - care") == "self-care"


def test_parentheses_spacing():
    assert normalize("a mudra ( hand gesture )helps") == "a mudra (hand gesture) helps"
    assert normalize("mudra(gesture)") == "mudra (gesture)"
