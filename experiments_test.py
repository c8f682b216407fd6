import csv

import pytest

from alphabet import SYMBOLS
from experiments import (
    FIXED_WIDTH_BITS,
    fixed_width_decode,
    fixed_width_encode,
    gen_english_like,
    gen_markov,
    gen_repetitive,
    generate_dataset,
    main,
    run_one,
)


class TestGenerators:
    @pytest.mark.parametrize("gen", [gen_english_like, gen_markov, gen_repetitive])
    def test_size_alphabet_and_seed(self, gen):
        text = gen(500, seed=3)
        assert len(text) == 500
        assert set(text) <= set(SYMBOLS)
        assert gen(500, seed=3) == text

    def test_unknown_name_falls_back(self):
        name, text = generate_dataset("nope", 100, seed=0)
        assert name == "nope_fallback_english_like"
        assert len(text) == 100

    def test_corpus_source(self):
        name, text = generate_dataset("corpus", 50, seed=0, corpus="abcd abcd abcd ")
        assert name == "corpus"
        assert set(text) <= set("abcd ")

    def test_markov_needs_longer_source(self):
        with pytest.raises(ValueError):
            gen_markov(10, source="ab")


def test_fixed_width_code():
    symbols = [0, 26, 13, 1]
    bits = fixed_width_encode(symbols)
    assert len(bits) == FIXED_WIDTH_BITS * len(symbols)
    assert fixed_width_decode(bits) == symbols


class TestRunOne:
    def test_pipelines(self):
        train_text = gen_markov(3_000, seed=1)
        test_text = gen_markov(500, seed=2)
        rows = {p: run_one(train_text, test_text, p, lazy=True) for p in ("fixed5", "huffman", "conditional")}
        assert all(row.correctness_ok == 1 for row in rows.values())
        assert rows["fixed5"].bits_per_symbol == 5.0
        assert rows["huffman"].bits_per_symbol < 5.0
        assert rows["conditional"].bits_per_symbol < rows["huffman"].bits_per_symbol

    def test_unknown_pipeline(self):
        with pytest.raises(ValueError):
            run_one("abcd", "abcd", "lzw")


def test_main_writes_csv(tmp_path):
    outdir = tmp_path / "results"
    rc = main([
        "--outdir", str(outdir), "--runs", "1", "--lazy", "--no_plots",
        "--exp1_train_kb", "2", "--exp1_test_kb", "1", "--exp1_generators", "markov",
        "--exp2_min_kb", "1", "--exp2_max_kb", "2",
    ])
    assert rc == 0
    with (outdir / "metrics.csv").open(encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    # exp1: 1 source, exp2: 2 sizes, 3 pipelines each
    assert len(rows) == 9
    assert all(r["correctness_ok"] == "1" for r in rows)
    assert (outdir / "summary.csv").exists()
