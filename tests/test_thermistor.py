from __future__ import annotations

import pytest

import thermistor as ntc


def _v_for_resistance(r: float, r_fixed: float, vref: float) -> float:
    # inverse of the divider formula
    return vref * r / (r_fixed + r)


@pytest.mark.parametrize(
    "r, expected",
    [
        (30_000.0, 0.0),
        (20_000.0, 12.5),
        (10_000.0, 25.0),
        (7_000.0, 37.5),
        (4_000.0, 50.0),
        (1_000.0, 50.0),  # clamped above 50 C
        (60_000.0, -37.5),  # first segment extrapolated below 0 C
    ],
)
def test_piecewise_curve(r, expected):
    v = _v_for_resistance(r, 10_000.0, 2.0)
    assert ntc.voltage_to_temperature(v, 10_000.0, 2.0) == pytest.approx(expected, abs=1e-6)


def test_adc_to_voltage():
    assert ntc.adc_to_voltage(0, 3.3) == 0.0
    assert ntc.adc_to_voltage(1023, 3.3) == pytest.approx(3.3)
    assert ntc.adc_to_voltage(512, 5.0) == pytest.approx(512 / 1023 * 5.0)


def test_valid_config_ranges():
    assert ntc.is_valid_adc_config(0, 3.3, 10_000.0)
    assert ntc.is_valid_adc_config(1023, 5.0, 100_000.0)
    assert not ntc.is_valid_adc_config(1024, 3.3, 10_000.0)
    assert not ntc.is_valid_adc_config(-1, 3.3, 10_000.0)
    assert not ntc.is_valid_adc_config(10, 0.0, 10_000.0)
    assert not ntc.is_valid_adc_config(10, 5.1, 10_000.0)
    assert not ntc.is_valid_adc_config(10, 3.3, 999.0)
    assert not ntc.is_valid_adc_config(10, 3.3, 100_001.0)


def test_adc_to_temperature_chain():
    v, t = ntc.adc_to_temperature(512, 3.3, 10_000.0)
    r = 10_000.0 * v / (3.3 - v)
    assert v == pytest.approx(512 / 1023 * 3.3)
    assert t == pytest.approx(25.0 * (30_000.0 - r) / 20_000.0)


def test_adc_to_temperature_rejects_bad_input():
    with pytest.raises(ntc.ThermistorError):
        ntc.adc_to_temperature(2000, 3.3, 10_000.0)


def test_saturated_divider():
    # adc=1023 puts the full reference on the thermistor: open circuit
    with pytest.raises(ntc.ThermistorError, match="saturated"):
        ntc.adc_to_temperature(1023, 3.3, 10_000.0)
