# tests/test_config.py

import json

import numpy as np
import pytest

from pydaptivebeamforming.config import GSCConfig, load_fixed_weights, parse_fixed_weights


VALID = dict(nchannel_ds=2, rls_ff=0.99, rls_reg=1e-2, pb_ff=0.95, pb_ref_channel=0, f_max=4000.0)


def test_config_from_dict_ignores_unknown_keys():
    cfg = GSCConfig.from_dict({**VALID, "comment": "lab array"})
    assert cfg.nchannel_ds == 2
    assert cfg.rls_ff == pytest.approx(0.99)
    assert cfg.to_dict() == VALID


def test_config_missing_fields_are_named():
    data = dict(VALID)
    del data["rls_reg"]
    del data["f_max"]
    with pytest.raises(ValueError, match="rls_reg, f_max"):
        GSCConfig.from_dict(data)


@pytest.mark.parametrize(
    "field, value",
    [
        ("nchannel_ds", 0),
        ("nchannel_ds", 1.5),
        ("rls_ff", 0.0),
        ("rls_ff", 1.01),
        ("rls_reg", 0.0),
        ("pb_ff", 1.0),
        ("pb_ref_channel", -1),
        ("f_max", -10.0),
        ("f_max", float("nan")),
    ],
)
def test_config_rejects_out_of_range_values(field, value):
    with pytest.raises(ValueError):
        GSCConfig(**{**VALID, field: value})


def test_config_rejects_wrong_types():
    with pytest.raises(TypeError):
        GSCConfig(**{**VALID, "nchannel_ds": "2"})
    with pytest.raises(TypeError):
        GSCConfig(**{**VALID, "rls_ff": None})


def test_config_allows_unit_forgetting_factor():
    cfg = GSCConfig(**{**VALID, "rls_ff": 1.0})
    assert cfg.rls_ff == 1.0


def test_config_from_json(tmp_path):
    path = tmp_path / "gsc.json"
    path.write_text(json.dumps(VALID))
    cfg = GSCConfig.from_json(path)
    assert cfg == GSCConfig(**VALID)


def test_config_from_json_rejects_non_object(tmp_path):
    path = tmp_path / "gsc.json"
    path.write_text(json.dumps([1, 2, 3]))
    with pytest.raises(ValueError, match="JSON object"):
        GSCConfig.from_json(path)


def test_parse_fixed_weights_layout():
    """Interleaved pairs, bin-major then channel-minor."""
    nfft, nchannel = 4, 2  # 3 bins
    flat = np.arange(2 * 3 * nchannel, dtype=float)
    W = parse_fixed_weights(flat, nfft, nchannel)

    assert W.shape == (3, 2)
    assert W[0, 0] == 0 + 1j
    assert W[0, 1] == 2 + 3j
    assert W[1, 0] == 4 + 5j
    assert W[2, 1] == 10 + 11j


def test_parse_fixed_weights_size_mismatch():
    with pytest.raises(ValueError, match="expected 2 \\* 3 \\* 2 = 12"):
        parse_fixed_weights(np.zeros(10), 4, 2)


def test_parse_fixed_weights_malformed():
    with pytest.raises(ValueError):
        parse_fixed_weights(np.zeros((3, 4)), 4, 2)
    with pytest.raises(ValueError):
        parse_fixed_weights(["a"] * 12, 4, 2)
    bad = np.zeros(12)
    bad[3] = np.nan
    with pytest.raises(ValueError, match="NaN"):
        parse_fixed_weights(bad, 4, 2)


def test_load_fixed_weights(tmp_path):
    path = tmp_path / "weights.json"
    flat = list(np.linspace(-1.0, 1.0, 12))
    path.write_text(json.dumps({"fixed_weights": flat}))

    W = load_fixed_weights(path, 4, 2)
    np.testing.assert_allclose(W, parse_fixed_weights(flat, 4, 2))


def test_load_fixed_weights_missing_key(tmp_path):
    path = tmp_path / "weights.json"
    path.write_text(json.dumps({"weights": []}))
    with pytest.raises(ValueError, match="fixed_weights"):
        load_fixed_weights(path, 4, 2)
