"""
Offline script to pre-generate the daily and classic puzzle pools.
Samples random letter sets, keeps the ones whose solution count falls in the
daily / classic windows and writes them to a JSON pool file.

    python generate_puzzles.py --wordlist wordlist.txt --output puzzles.json
    python generate_puzzles.py --recount --output puzzles.json
"""
import argparse
import asyncio
import logging
import random
from collections import Counter

from heptagrama.config import LANGUAGE, LOG_LEVEL, PUZZLES_FILE, WORDLIST_FILE, get_profile
from heptagrama.dictionary import load_dictionary
from heptagrama.mechanics.pool_generator import add_solution_counts, generate_pools, load_pool, save_pool
from heptagrama.solver import PuzzleSolver


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Generate heptagrama daily/classic puzzle pools")
    parser.add_argument("--language", default=LANGUAGE, help="Tuning profile (es, en)")
    parser.add_argument("--wordlist", default=WORDLIST_FILE, help="Line-delimited word list")
    parser.add_argument("--output", default=PUZZLES_FILE, help="Pool JSON file")
    parser.add_argument("--daily-min", type=int)
    parser.add_argument("--daily-max", type=int)
    parser.add_argument("--classic-min", type=int)
    parser.add_argument("--classic-max", type=int)
    parser.add_argument("--candidates", type=int, help="Random letter sets to try")
    parser.add_argument("--min-len", type=int)
    parser.add_argument("--allow-enye", action="store_true", default=None,
                        help="Let outer letters include the diacritic letter")
    parser.add_argument("--recount", action="store_true",
                        help="Only recompute solutionCount for an existing pool file")
    parser.add_argument("--seed", type=int, default=None)
    return parser.parse_args(argv)


def settings_from_args(args) -> dict:
    overrides = {
        'daily_min': args.daily_min,
        'daily_max': args.daily_max,
        'classic_min': args.classic_min,
        'classic_max': args.classic_max,
        'candidates': args.candidates,
        'min_len': args.min_len,
        'allow_enye': args.allow_enye,
    }
    return {**get_profile(args.language)['pools'], **{k: v for k, v in overrides.items() if v is not None}}


def recount(args, solver):
    print(f"🔁 Recounting solutions in {args.output}...")
    puzzles, error = load_pool(args.output)
    if error:
        print(f"❌ Could not read {args.output}: {error}")
        return 1

    updated = add_solution_counts(puzzles, solver)
    changed = sum(1 for old, new in zip(puzzles, updated) if old.solution_count != new.solution_count)
    save_pool(args.output, updated)
    print(f"✅ {len(updated)} puzzles recounted ({changed} changed)")
    return 0


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')

    profile = get_profile(args.language)
    print("🔍 Building dictionary...")
    index, error = load_dictionary(args.wordlist, keep_enye=profile['keep_enye'])
    if error or index.is_empty:
        print(f"❌ No words loaded from {args.wordlist}")
        return 1
    print(f"✅ Dictionary: {len(index)} words")

    solver = PuzzleSolver(index)
    if args.recount:
        return recount(args, solver)

    settings = settings_from_args(args)
    rng = random.Random(args.seed)

    def report(done, total):
        if done % 500 == 0 or done == total:
            print(f"  Checked {done}/{total} candidates...")

    print(f"🎲 Generating pools ({settings['candidates']} candidates)...")
    result = asyncio.run(generate_pools(solver, settings, rng=rng, on_progress=report))

    print(f"✅ Daily: {len(result.daily)} | Classic: {len(result.classic)}")
    save_pool(args.output, result.puzzles)
    print(f"💾 Saved to {args.output}")

    print("📊 Solution count distribution (by 10s):")
    buckets = Counter((p.mode, p.solution_count // 10 * 10) for p in result.puzzles)
    for (mode, bucket), count in sorted(buckets.items()):
        print(f"   {mode} {bucket}-{bucket + 9}: {count}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
