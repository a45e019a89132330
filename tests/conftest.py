import pytest

from smoothlm import AdditiveSmoothedModel, DiscountedBackoffModel


@pytest.fixture
def write_file(tmp_path):
    """Write ``lines`` to a file under tmp_path and return its path as a string."""
    def _write(name, lines):
        path = tmp_path / name
        path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def discount_model():
    model = DiscountedBackoffModel(discount=0.1)
    model.train(["a b a", "a b c"])
    return model


@pytest.fixture
def additive_model():
    model = AdditiveSmoothedModel({"x", "y"}, lam=0.01)
    model.train(["x y"])
    return model
