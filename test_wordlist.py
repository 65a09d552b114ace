from unittest.mock import MagicMock, patch

from heptagrama.wordlist import build_feminine, build_wordlist, nltk_wordlist, parse_wordlist_line, write_wordlist


def test_parse_wordlist_line():
    assert parse_wordlist_line("") is None
    assert parse_wordlist_line("   ") is None
    assert parse_wordlist_line("# comment") is None
    assert parse_wordlist_line(",ra") is None
    assert parse_wordlist_line("perro") == ("perro", None)
    assert parse_wordlist_line(" abad , desa \n") == ("abad", "desa")


def test_build_feminine():
    assert build_feminine("abacalero", "ra") == "abacalera"
    assert build_feminine("abadengo", "ga") == "abadenga"
    assert build_feminine("abad", "desa") == "abadesa"
    assert build_feminine("abastecedor", "ra") == "abastecedora"
    assert build_feminine("ablatorio", "ria") == "ablatoria"
    assert build_feminine("abrasivo", "va") == "abrasiva"
    assert build_feminine("abietíneo", "a") == "abietínea"
    assert build_feminine("perro", None) is None


def test_build_wordlist():
    lines = ["# header", "Abad,desa", "camión", "", "niño,ña", "camion"]
    assert build_wordlist(lines) == ["abad", "abadesa", "camion", "niña", "niño"]
    assert build_wordlist(lines, keep_enye=False) == ["abad", "abadesa", "camion", "nina", "nino"]


def test_nltk_wordlist():
    corpus = MagicMock()
    corpus.words.return_value = ["Apple", "ox", "naïve", "Bee", "apple", "don't"]
    with patch("nltk.data.find"), patch("nltk.download") as download:
        assert nltk_wordlist(corpus=corpus) == ["apple", "bee"]
    download.assert_not_called()


def test_nltk_wordlist_downloads_when_missing():
    corpus = MagicMock()
    corpus.words.return_value = ["Zebra", "cat"]
    with patch("nltk.data.find", side_effect=LookupError), patch("nltk.download") as download:
        assert nltk_wordlist(min_len=4, corpus=corpus) == ["zebra"]
    download.assert_called_once_with('words', quiet=True)


def test_write_wordlist(tmp_path):
    path = tmp_path / "wordlist.txt"
    write_wordlist(str(path), ["abad", "niño"])
    assert path.read_text(encoding="utf-8") == "abad\nniño\n"
