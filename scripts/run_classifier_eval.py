"""
Runs labelled prompts through MessageClassifier in substring and
word-boundary modes and reports accuracy plus the prompts where the modes
disagree (candidates for keyword-table fixes).

Run: python scripts/run_classifier_eval.py --prompts eval/classifier_prompts.jsonl
"""
import argparse
import json
import os
import sys
from collections import defaultdict

sys.path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "apps", "api"))

from chat.classifier import MessageClassifier

MODES = {
    "substring": MessageClassifier(),
    "word_boundary": MessageClassifier(word_boundaries=True),
}


def label(classifier, message):
    hit = classifier.classify(message)
    return hit.category.value if hit else None


def main():
    parser = argparse.ArgumentParser(description="Classifier keyword evaluation")
    parser.add_argument("--prompts", default="eval/classifier_prompts.jsonl")
    parser.add_argument("--out", default=None, help="Optional JSONL file for per-prompt results")
    args = parser.parse_args()

    prompts = []
    with open(args.prompts, "r", encoding="utf-8") as f:
        for line in f:
            if line.strip():
                prompts.append(json.loads(line))

    results = []
    for p in prompts:
        row = {"id": p["id"], "message": p["message"], "expected": p.get("expected")}
        for mode, classifier in MODES.items():
            row[mode] = label(classifier, p["message"])
        results.append(row)

    print(f"Prompts: {len(results)}")
    for mode in MODES:
        per_cat = defaultdict(lambda: [0, 0])
        for r in results:
            key = r["expected"] or "none"
            per_cat[key][1] += 1
            if r[mode] == r["expected"]:
                per_cat[key][0] += 1
        total_ok = sum(ok for ok, _ in per_cat.values())
        print(f"\n[{mode}] accuracy {total_ok}/{len(results)} ({total_ok / max(len(results), 1):.0%})")
        for cat, (ok, n) in sorted(per_cat.items()):
            print(f"  {cat:<18} {ok}/{n}")

    disagreements = [r for r in results if r["substring"] != r["word_boundary"]]
    if disagreements:
        print("\nMode disagreements:")
        for r in disagreements:
            print(f"  {r['id']}: substring={r['substring']} word_boundary={r['word_boundary']} "
                  f"expected={r['expected']} | {r['message']}")

    if args.out:
        with open(args.out, "w", encoding="utf-8") as f_out:
            for r in results:
                f_out.write(json.dumps(r, ensure_ascii=False) + "\n")
        print(f"\nWrote {args.out}")


if __name__ == "__main__":
    main()
