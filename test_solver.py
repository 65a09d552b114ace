import pytest

from heptagrama.dictionary import DictionaryIndex, EmptyDictionaryError, build_index
from heptagrama.game import LetterSet
from heptagrama.solver import PuzzleSolver, SolveKey

WORDS = ["rio", "ropa", "roto", "pirateo", "tira", "pera", "cafe", "cada", "oso", "sol", "los", "sola", "patio"]


def make_solver(words=WORDS):
    return PuzzleSolver(build_index(words))


def test_basic_solve():
    solver = PuzzleSolver(build_index(["rio", "ropa", "roto"]))
    assert solver.solve("r", ["o", "p", "a", "t", "i", "x", "z"]) == ("rio", "ropa", "roto")


def test_solutions_respect_letters():
    solver = make_solver()
    outer = ["o", "p", "a", "t", "i", "e"]
    solutions = solver.solve("r", outer)

    assert solutions
    allowed = {"r", *outer}
    for word in solutions:
        assert "r" in word
        assert set(word) <= allowed
    assert "patio" not in solutions  # no center
    assert list(solutions) == sorted(solutions)


def test_outer_order_does_not_matter():
    solver = make_solver()
    first = solver.solve("r", ["o", "p", "a", "t", "i", "e"])
    second = solver.solve("r", ["e", "i", "t", "a", "p", "o"])

    assert first == second
    assert solver.cache_size == 1
    assert solver.make_key("r", "opatie") == solver.make_key("R", "EITAPO")


def test_redundant_letters_are_harmless():
    solver = make_solver()
    assert solver.solve("r", ["o", "o", "p", "a", "t", "i", "e", "r"]) == solver.solve("r", "opatie")


def test_min_len():
    solver = PuzzleSolver(build_index(["rio", "ropa", "roto"]))
    assert solver.solve("r", "opatix", min_len=4) == ("ropa", "roto")


def test_extra_letters():
    solver = make_solver()
    assert solver.solve("o", "labcde") == ()
    assert solver.solve("o", "labcde", extra=("s",)) == ("los", "oso", "sol", "sola")


def test_structural_cache_key():
    solver = make_solver()
    solver.solve("o", "labcde")
    solver.solve("o", "labcde", extra=("s",))
    assert solver.cache_size == 2
    assert solver.make_key("o", "labcde", 3, ("s",)) == SolveKey("o", ("a", "b", "c", "d", "e", "l"), 3, ("s",))

    solver.clear_cache()
    assert solver.cache_size == 0


def test_solve_letters_and_superheptas():
    solver = make_solver()
    letters = LetterSet("r", ("o", "p", "a", "t", "i", "e"))
    solutions = solver.solve_letters(letters)

    assert solutions == ("pera", "pirateo", "rio", "ropa", "roto", "tira")
    assert solver.superheptas(solutions, letters) == ["pirateo"]


def test_invalid_center():
    with pytest.raises(ValueError):
        make_solver().solve("1", "opatie")


def test_empty_dictionary():
    solver = PuzzleSolver(DictionaryIndex(()))
    with pytest.raises(EmptyDictionaryError):
        solver.solve("r", "opatie")
