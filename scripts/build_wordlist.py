"""
Builds the normalized, one-word-per-line list the dictionary index loads.

    python scripts/build_wordlist.py --source wordlist_raw.txt --output wordlist.txt
    python scripts/build_wordlist.py --nltk --output wordlist_en.txt
"""
import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from heptagrama.wordlist import build_feminine, build_wordlist, nltk_wordlist, write_wordlist  # noqa: E402

EXAMPLES = [
    ('abacalero', 'ra', 'abacalera'),
    ('abadengo', 'ga', 'abadenga'),
    ('abad', 'desa', 'abadesa'),
    ('abastecedor', 'ra', 'abastecedora'),
    ('ablatorio', 'ria', 'ablatoria'),
    ('abrasivo', 'va', 'abrasiva'),
]


def check_examples() -> bool:
    ok = True
    for masc, suffix, expected in EXAMPLES:
        fem = build_feminine(masc, suffix)
        if fem == expected:
            print(f"✓ {masc}, {suffix} -> {fem}")
        else:
            ok = False
            print(f"✗ {masc}, {suffix} -> {fem} (expected {expected})")
    return ok


def main(argv=None):
    parser = argparse.ArgumentParser(description="Build a normalized word list")
    parser.add_argument("--source", help="Raw 'masc,suffix' list")
    parser.add_argument("--nltk", action="store_true", help="Use the NLTK English corpus instead")
    parser.add_argument("--output", default="wordlist.txt")
    parser.add_argument("--fold-enye", action="store_true", help="Write 'ñ' as 'n'")
    args = parser.parse_args(argv)

    if not check_examples():
        return 1

    if args.nltk:
        words = nltk_wordlist()
    elif args.source:
        with open(args.source, 'r', encoding='utf-8') as f:
            words = build_wordlist(f, keep_enye=not args.fold_enye)
    else:
        parser.error("one of --source or --nltk is required")

    write_wordlist(args.output, words)
    print(f"✅ {len(words)} words written to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
