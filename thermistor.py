"""NTC thermistor readout: 10-bit ADC -> voltage -> temperature.

Independent from the RTC codec (no shared state).

The thermistor sits on the low side of a divider with a fixed resistor to Vref:
  R_ntc = R_fixed * V / (Vref - V)

Temperature is a piecewise-linear fit through three calibration points:
  0 C -> 30k, 25 C -> 10k, 50 C -> 4k
Above 50 C the curve is clamped; below 0 C the first segment is extrapolated.
"""

from __future__ import annotations

ADC_MIN = 0
ADC_MAX = 1023

VREF_MAX = 5.0
R_FIXED_MIN = 1_000.0
R_FIXED_MAX = 100_000.0

TEMP_0C_RES = 30_000.0
TEMP_25C_RES = 10_000.0
TEMP_50C_RES = 4_000.0


class ThermistorError(ValueError):
    pass


def is_valid_adc_config(adc_value: int, reference_voltage: float, fixed_resistor: float) -> bool:
    if adc_value < ADC_MIN or adc_value > ADC_MAX:
        return False
    if reference_voltage <= 0.0 or reference_voltage > VREF_MAX:
        return False
    if fixed_resistor < R_FIXED_MIN or fixed_resistor > R_FIXED_MAX:
        return False
    return True


def adc_to_voltage(raw_adc_value: int, vref: float) -> float:
    return (raw_adc_value / ADC_MAX) * vref


def thermistor_resistance(voltage: float, fixed_resistor: float, vref: float) -> float:
    if voltage >= vref:
        raise ThermistorError(f"divider saturated (V={voltage:.3f} >= Vref={vref:.3f}): thermistor open?")
    return fixed_resistor * (voltage / (vref - voltage))


def voltage_to_temperature(voltage: float, fixed_resistor: float, vref: float) -> float:
    r = thermistor_resistance(voltage, fixed_resistor, vref)

    # 0..25 C
    if r >= TEMP_25C_RES:
        return 25.0 * (TEMP_0C_RES - r) / (TEMP_0C_RES - TEMP_25C_RES)
    # 25..50 C
    if r >= TEMP_50C_RES:
        return 25.0 + 25.0 * (TEMP_25C_RES - r) / (TEMP_25C_RES - TEMP_50C_RES)
    return 50.0


def adc_to_temperature(adc_value: int, vref: float, fixed_resistor: float) -> tuple[float, float]:
    """Validate the config, then return (voltage, temperature_C)."""
    if not is_valid_adc_config(adc_value, vref, fixed_resistor):
        raise ThermistorError(
            f"invalid input values: adc={adc_value} vref={vref} r_fixed={fixed_resistor} "
            f"(ADC: {ADC_MIN}-{ADC_MAX} | Vref: 0-{VREF_MAX:g}V | Resistor: 1k-100k)"
        )
    voltage = adc_to_voltage(adc_value, vref)
    return voltage, voltage_to_temperature(voltage, fixed_resistor, vref)


__all__ = [
    "ADC_MIN",
    "ADC_MAX",
    "ThermistorError",
    "is_valid_adc_config",
    "adc_to_voltage",
    "thermistor_resistance",
    "voltage_to_temperature",
    "adc_to_temperature",
]
