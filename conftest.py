import pytest

from code_tables import train
from experiments import gen_markov

CAT_CORPUS = "the cat sat on the mat "


@pytest.fixture(scope="session")
def cat_store():
    return train(CAT_CORPUS)


@pytest.fixture(scope="session")
def markov_store():
    return train(gen_markov(40_000, seed=1))
