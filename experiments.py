"""
Experiment: fixed-width vs static Huffman vs conditional (3-letter context) Huffman

Every coder is trained on one text and measured on a second text drawn from the
same source, so the conditional code is not scored on the exact text it memorised.

Outputs (in --outdir):
  - metrics.csv     (raw row per run per configuration)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 3
  python experiments.py --outdir results --runs 3 --corpus mobydick.txt
  python experiments.py --outdir results --runs 1 --exp1_generators english_like,markov --no_exp2

Notes:
  Building all 19683 conditional tables dominates the conditional pipeline's
  build time; --workers spreads it over processes, --lazy builds only the
  tables the test text touches.
"""

from __future__ import annotations

import argparse
import csv
import random
import statistics
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import matplotlib.pyplot as plt

from alphabet import ALPHABET_SIZE, SYMBOLS, text_to_symbols, symbols_to_text
from cleaning import read_corpus
from code_tables import train
from codec import Decoder, Encoder
from frequency import smooth
import huffman as huff

FIXED_WIDTH_BITS = 5  # ceil(log2(27))
PIPELINES = ("fixed5", "huffman", "conditional")

SAMPLE_TEXT = (
    "the old man sat by the fire and told the children about the winter when the river froze "
    "and the mill stood still for three months they listened and the wind went on outside "
    "there was a time he said when nobody in this valley had seen a train and the only road "
    "ran over the hill to the market town where his father sold wool every autumn "
)


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def freq_table(symbols: List[int]) -> Dict[int, int]:
    ft: Dict[int, int] = {s: 0 for s in range(ALPHABET_SIZE)}
    for s in symbols:
        ft[s] += 1
    return ft


def fixed_width_encode(symbols: List[int]) -> str:
    return "".join(format(s, f"0{FIXED_WIDTH_BITS}b") for s in symbols)

def fixed_width_decode(bits: str) -> List[int]:
    return [int(bits[i:i + FIXED_WIDTH_BITS], 2) for i in range(0, len(bits), FIXED_WIDTH_BITS)]


# Synthetic dataset generators

def _sample_cdf(rng: random.Random, cdf: List[float]) -> int:
    r = rng.random()
    lo, hi = 0, len(cdf) - 1
    while lo < hi:
        mid = (lo + hi) // 2
        if r <= cdf[mid]:
            hi = mid
        else:
            lo = mid + 1
    return lo

def _cdf(weights: List[float]) -> List[float]:
    total = sum(weights)
    cdf = []
    acc = 0.0
    for w in weights:
        acc += w / total
        cdf.append(acc)
    return cdf

def gen_uniform(size: int, seed: int = 0) -> str:
    rng = random.Random(seed)
    return "".join(rng.choice(SYMBOLS) for _ in range(size))

def gen_english_like(size: int, seed: int = 0) -> str:
    """Independent letters with rough English frequencies; no context to exploit."""
    rng = random.Random(seed)
    chars = " etaoinshrdlcumwfgypbvkjxqz"
    weights = []
    for ch in chars:
        if ch == ' ':
            weights.append(13.0)
        elif ch in "etaoinshrdlu":
            weights.append(6.0)
        elif ch in "cmfwgypbvk":
            weights.append(2.5)
        else:
            weights.append(1.2)
    cdf = _cdf(weights)
    return "".join(chars[_sample_cdf(rng, cdf)] for _ in range(size))

def gen_markov(size: int, seed: int = 0, source: str = SAMPLE_TEXT, order: int = 3) -> str:
    """Text from an order-n character chain fitted on source; strong context structure."""
    if len(source) <= order:
        raise ValueError(f"source text needs more than {order} characters")
    rng = random.Random(seed)
    follow: Dict[str, List[str]] = {}
    wrapped = source + source[:order]
    for i in range(len(source)):
        follow.setdefault(wrapped[i:i + order], []).append(wrapped[i + order])

    state = source[:order]
    out = list(state)
    while len(out) < size:
        nxt = rng.choice(follow[state])
        out.append(nxt)
        state = state[1:] + nxt
    return "".join(out[:size])

def gen_repetitive(size: int, seed: int = 0, phrase: str = "the cat sat on the mat ", noise: float = 0.02) -> str:
    rng = random.Random(seed)
    out = []
    while len(out) < size:
        for ch in phrase:
            out.append(rng.choice(SYMBOLS) if rng.random() < noise else ch)
    return "".join(out[:size])

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], str]] = {
    "uniform27": lambda size, seed: gen_uniform(size, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
    "markov": lambda size, seed: gen_markov(size, seed=seed),
    "repetitive": lambda size, seed: gen_repetitive(size, seed=seed),
}

def generate_dataset(name: str, size: int, seed: int, corpus: Optional[str] = None) -> Tuple[str, str]:
    """
    "corpus" draws a Markov text from the user corpus when one is given; unknown
    names fall back to english_like so the run does not fail halfway
    """
    if name == "corpus" and corpus:
        return name, gen_markov(size, seed=seed, source=corpus)
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        return f"{name}_fallback_english_like", gen_english_like(size, seed=seed)
    return name, fn(size, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    train_symbols: int
    test_symbols: int
    run_id: int
    pipeline: str  # "fixed5", "huffman" or "conditional"

    build_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    encoded_bits: int
    bits_per_symbol: float
    ratio_vs_fixed: float

    correctness_ok: int  # 1 or 0


def run_one(train_text: str, test_text: str, pipeline: str, workers: int = 1, lazy: bool = False) -> MetricRow:
    symbols = text_to_symbols(test_text)

    t0 = now_ns()
    if pipeline == "fixed5":
        t1 = now_ns()
        encoded = fixed_width_encode(symbols)
        t2 = now_ns()
        decoded = fixed_width_decode(encoded)
        t3 = now_ns()

    elif pipeline == "huffman":
        # one static code for the whole text, smoothed like the conditional vectors
        vector = smooth([freq_table(text_to_symbols(train_text))[s] for s in range(ALPHABET_SIZE)])
        root = huff.build_huffman_tree(dict(enumerate(vector)))
        code_map = huff.generate_huffman_codes(root)
        t1 = now_ns()
        encoded = huff.huffman_encode(symbols, code_map)
        t2 = now_ns()
        decoded = huff.huffman_decode(encoded, root)
        t3 = now_ns()

    elif pipeline == "conditional":
        store = train(train_text, workers=workers, lazy=lazy)
        t1 = now_ns()
        encoded = Encoder(store).encode(symbols)
        t2 = now_ns()
        decoded = Decoder(store).decode(encoded)
        t3 = now_ns()

    else:
        raise ValueError(f"pipeline must be one of {PIPELINES}")

    n = max(1, len(symbols))
    bits_per_symbol = len(encoded) / n
    return MetricRow(
        exp_name="",
        dataset_name="",
        train_symbols=len(train_text),
        test_symbols=len(symbols),
        run_id=0,
        pipeline=pipeline,
        build_ms=ns_to_ms(t1 - t0),
        encode_ms=ns_to_ms(t2 - t1),
        decode_ms=ns_to_ms(t3 - t2),
        total_ms=ns_to_ms(t3 - t0),
        encoded_bits=len(encoded),
        bits_per_symbol=bits_per_symbol,
        ratio_vs_fixed=bits_per_symbol / FIXED_WIDTH_BITS,
        correctness_ok=1 if symbols_to_text(decoded) == test_text else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, train_symbols, pipeline and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int, str], List[MetricRow]] = {}
    for r in rows:
        key = (r.exp_name, r.dataset_name, r.train_symbols, r.pipeline)
        key_to.setdefault(key, []).append(r)

    summary_fields = [
        "exp_name", "dataset_name", "train_symbols", "pipeline", "n_runs",
        "bits_per_symbol_mean", "bits_per_symbol_stdev",
        "build_ms_mean", "build_ms_stdev",
        "encode_ms_mean", "encode_ms_stdev",
        "decode_ms_mean", "decode_ms_stdev",
        "correctness_ok_rate",
    ]

    def mean_stdev(vals: List[float]) -> Tuple[float, float]:
        if len(vals) == 1:
            return vals[0], 0.0
        return statistics.mean(vals), statistics.stdev(vals)

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for key, items in sorted(key_to.items()):
            exp_name, dataset_name, train_symbols, pipeline = key

            bps_m, bps_s = mean_stdev([x.bits_per_symbol for x in items])
            bd_m, bd_s = mean_stdev([x.build_ms for x in items])
            en_m, en_s = mean_stdev([x.encode_ms for x in items])
            de_m, de_s = mean_stdev([x.decode_ms for x in items])

            w.writerow({
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "train_symbols": train_symbols,
                "pipeline": pipeline,
                "n_runs": len(items),
                "bits_per_symbol_mean": bps_m,
                "bits_per_symbol_stdev": bps_s,
                "build_ms_mean": bd_m,
                "build_ms_stdev": bd_s,
                "encode_ms_mean": en_m,
                "encode_ms_stdev": en_s,
                "decode_ms_mean": de_m,
                "decode_ms_stdev": de_s,
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            })


# Plotting

def plot_experiment_1(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))

    def mean_for(dataset: str, pipeline: str, field: str) -> float:
        vals = [getattr(r, field) for r in exp_rows if r.dataset_name == dataset and r.pipeline == pipeline]
        return statistics.mean(vals) if vals else float("nan")

    x = list(range(len(datasets)))

    plt.figure()
    for p in PIPELINES:
        y = [mean_for(d, p, "bits_per_symbol") for d in datasets]
        plt.plot(x, y, marker="o", label=p)
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Bits per Symbol")
    plt.title("Experiment 1: Bits per Symbol by Source")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp1_bits_per_symbol.png", dpi=200)
    plt.close()

    plt.figure()
    for p in PIPELINES:
        y = [mean_for(d, p, "total_ms") for d in datasets]
        plt.plot(x, y, marker="o", label=p)
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Total Time (ms) (build + encode + decode)")
    plt.title("Experiment 1: Total Runtime by Source")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp1_total_time.png", dpi=200)
    plt.close()


def plot_experiment_2(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_training_size"]
    if not exp_rows:
        return

    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.train_symbols for r in dist_rows))

        def mean_size(size: int, pipeline: str, field: str) -> float:
            vals = [getattr(r, field) for r in dist_rows if r.train_symbols == size and r.pipeline == pipeline]
            return statistics.mean(vals) if vals else float("nan")

        plt.figure()
        for p in PIPELINES:
            y = [mean_size(s, p, "bits_per_symbol") for s in sizes]
            plt.plot(sizes, y, marker="o", label=p)
        plt.xscale("log", base=2)
        plt.xlabel("Training Text (symbols)")
        plt.ylabel("Bits per Symbol")
        plt.title(f"Experiment 2: Bits per Symbol vs Training Size ({dist})")
        plt.legend()
        plt.tight_layout()
        plt.savefig(outdir / f"exp2_bits_per_symbol_{dist}.png", dpi=200)
        plt.close()

        plt.figure()
        y = [mean_size(s, "conditional", "build_ms") for s in sizes]
        plt.plot(sizes, y, marker="o")
        plt.xscale("log", base=2)
        plt.xlabel("Training Text (symbols)")
        plt.ylabel("Build Time (ms)")
        plt.title(f"Experiment 2: Conditional Table Build Time ({dist})")
        plt.tight_layout()
        plt.savefig(outdir / f"exp2_build_time_{dist}.png", dpi=200)
        plt.close()


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=3, help="Repetitions per configuration")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")
    ap.add_argument("--corpus", type=str, default=None, help="Optional training text, enables the 'corpus' source")
    ap.add_argument("--workers", type=int, default=1, help="Processes used to build conditional tables")
    ap.add_argument("--lazy", action="store_true", help="Build conditional tables on first use")
    ap.add_argument("--no_plots", action="store_true", help="Only write the CSV files")

    # Experiment toggles
    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (source comparison)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (training size)")

    # Experiment 1 controls
    ap.add_argument("--exp1_train_kb", type=int, default=64, help="Experiment 1 training text size in KB")
    ap.add_argument("--exp1_test_kb", type=int, default=8, help="Experiment 1 test text size in KB")
    ap.add_argument("--exp1_generators", type=str, default="uniform27,english_like,markov,repetitive",
                    help="Comma-separated source names for experiment 1")

    # Experiment 2 controls
    ap.add_argument("--exp2_min_kb", type=int, default=1, help="Experiment 2 min training size in KB (power-of-two growth)")
    ap.add_argument("--exp2_max_kb", type=int, default=256, help="Experiment 2 max training size in KB")
    ap.add_argument("--exp2_generators", type=str, default="markov",
                    help="Comma-separated source names for experiment 2")

    args = ap.parse_args(argv)

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    corpus = read_corpus(args.corpus) if args.corpus else None
    rows: List[MetricRow] = []

    def run_all(exp_name: str, gen_name: str, train_size: int, test_size: int, seed: int, run_id: int) -> None:
        dataset_name, train_text = generate_dataset(gen_name, train_size, seed, corpus)
        _, test_text = generate_dataset(gen_name, test_size, seed + 1, corpus)
        for pipeline in PIPELINES:
            row = run_one(train_text, test_text, pipeline, workers=args.workers, lazy=args.lazy)
            row.exp_name = exp_name
            row.dataset_name = dataset_name
            row.run_id = run_id
            rows.append(row)

    # Experiment 1: sources (fixed sizes)
    if not args.no_exp1:
        train_size = max(1, args.exp1_train_kb) * 1024
        test_size = max(1, args.exp1_test_kb) * 1024
        for gen_name in parse_csv_list(args.exp1_generators):
            for run_id in range(1, args.runs + 1):
                print(f"exp1 {gen_name} run {run_id}")
                run_all("exp1_distribution", gen_name, train_size, test_size, args.seed + 2 * run_id, run_id)

    # Experiment 2: training size scaling (powers of 2)
    if not args.no_exp2:
        sizes: List[int] = []
        s = max(1, args.exp2_min_kb) * 1024
        while s <= max(1, args.exp2_max_kb) * 1024:
            sizes.append(s)
            s *= 2
        test_size = max(1, args.exp1_test_kb) * 1024

        for gen_name in parse_csv_list(args.exp2_generators):
            for size in sizes:
                for run_id in range(1, args.runs + 1):
                    print(f"exp2 {gen_name} {size // 1024}kb run {run_id}")
                    run_all("exp2_training_size", gen_name, size, test_size, args.seed + 10_000 + size + 2 * run_id, run_id)

    # Write raw and summary
    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    if not args.no_plots:
        plot_experiment_1(rows, outdir)
        plot_experiment_2(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    if not args.no_plots:
        print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
