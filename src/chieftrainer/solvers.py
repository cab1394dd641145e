"""Worked numeric problems behind the calculation questions.

Each solver draws its inputs from a caller-supplied ``random.Random`` and
returns the correct result together with values produced by common mistakes,
which become the wrong options. Inputs are chosen from short lists of plant
figures so prompts read like real exam questions.
"""

from __future__ import annotations

import math
import random
from collections.abc import Callable
from dataclasses import dataclass

WATER_SPECIFIC_HEAT = 4.19
RHO_G_WATER = 9.81
KW_PER_TON_REFRIGERATION = 3.517
OXYGEN_IN_AIR = 0.232

# Saturated steam properties: pressure MPa, hf and hfg in kJ/kg.
STEAM_TABLE = (
    (0.5, 640.1, 2107.4),
    (1.0, 762.6, 2015.3),
    (1.5, 844.7, 1945.2),
    (2.0, 908.6, 1888.6),
    (3.0, 1008.4, 1795.7),
)


@dataclass(frozen=True)
class Worked:
    """One drawn problem: prompt inputs, correct result, and mistaken results."""

    values: dict[str, float]
    answer: float
    mistakes: tuple[float, ...]


Solver = Callable[[random.Random], Worked]


def direct_stress(rng: random.Random) -> Worked:
    area = rng.choice([100, 125, 150, 200, 250, 400, 500])
    load = rng.choice([10, 20, 25, 30, 40, 50, 60, 75, 80, 100])
    stress = load * 1000 / area
    return Worked({"area": area, "load": load}, stress, (stress / 10, stress * 10, stress / 2))


def hoop_stress(rng: random.Random) -> Worked:
    diameter = rng.choice([600, 800, 1000, 1200, 1500, 1800])
    thickness = rng.choice([8, 10, 12, 15, 20])
    pressure = rng.choice([1, 1.5, 2, 2.5, 3])
    stress = pressure * diameter / (2 * thickness)
    return Worked(
        {"diameter": diameter, "thickness": thickness, "pressure": pressure},
        stress,
        (stress / 2, stress * 2, stress / 4),
    )


def lever_moment(rng: random.Random) -> Worked:
    force = rng.choice([150, 200, 250, 300, 400, 500, 600, 800])
    distance = rng.choice([0.25, 0.4, 0.5, 0.6, 0.75, 1.2, 1.5])
    moment = force * distance
    return Worked({"force": force, "distance": distance}, moment, (force / distance, force, moment / 10))


def kinetic_energy(rng: random.Random) -> Worked:
    mass = rng.choice([4, 10, 12, 20, 30, 40, 50])
    velocity = rng.choice([2, 4, 5, 6, 8, 10, 12])
    energy = 0.5 * mass * velocity**2
    return Worked(
        {"mass": mass, "velocity": velocity},
        energy,
        (mass * velocity**2, 0.5 * mass * velocity, mass * velocity),
    )


def sensible_heat(rng: random.Random) -> Worked:
    mass = rng.choice([2, 5, 8, 10, 12, 15, 20, 25])
    t_start = rng.choice([10, 15, 20, 25])
    t_end = rng.choice([60, 70, 80, 90, 95])
    rise = t_end - t_start
    heat = mass * WATER_SPECIFIC_HEAT * rise
    return Worked(
        {"mass": mass, "t_start": t_start, "t_end": t_end, "rise": rise, "c": WATER_SPECIFIC_HEAT},
        heat,
        (mass * WATER_SPECIFIC_HEAT * t_end, heat / 10, mass * rise),
    )


def carnot(rng: random.Random) -> Worked:
    hot = rng.choice([500, 600, 700, 800, 900, 1000])
    cold = rng.choice([280, 290, 300, 310, 320])
    efficiency = (1 - cold / hot) * 100
    celsius = (1 - (cold - 273) / (hot - 273)) * 100
    return Worked({"hot": hot, "cold": cold}, efficiency, ((hot - cold) / cold * 100, celsius, cold / hot * 100))


def boyle(rng: random.Random) -> Worked:
    v1 = rng.choice([1, 1.5, 2, 2.5, 3, 4])
    p1 = rng.choice([100, 101, 120, 150, 200])
    p2 = rng.choice([300, 400, 500, 600, 800])
    v2 = p1 * v1 / p2
    return Worked({"v1": v1, "p1": p1, "p2": p2}, v2, (v1 * p2 / p1, v2 * 2, v1 - v2))


def thermal_expansion(rng: random.Random) -> Worked:
    length = rng.choice([10, 15, 20, 25, 30, 40, 50])
    alpha = rng.choice([11, 12, 13])
    rise = rng.choice([100, 150, 200, 250, 300])
    growth = alpha * length * rise / 1000
    return Worked({"length": length, "alpha": alpha, "rise": rise}, growth, (growth / 10, growth * 10, growth / 2))


def cycle_efficiency(rng: random.Random) -> Worked:
    turbine = rng.choice([800, 900, 1000, 1100, 1200])
    pump = rng.choice([5, 8, 10, 12, 15])
    heat = rng.choice([2800, 3000, 3200, 3400])
    net = turbine - pump
    return Worked(
        {"turbine": turbine, "pump": pump, "heat": heat, "net": net},
        net / heat * 100,
        (turbine / heat * 100, (turbine + pump) / heat * 100, (heat - net) / heat * 100),
    )


def wet_steam_enthalpy(rng: random.Random) -> Worked:
    pressure, hf, hfg = rng.choice(STEAM_TABLE)
    dryness = rng.choice([0.85, 0.88, 0.9, 0.92, 0.95, 0.97])
    enthalpy = hf + dryness * hfg
    return Worked(
        {"pressure": pressure, "hf": hf, "hfg": hfg, "dryness": dryness},
        enthalpy,
        (hf + hfg, dryness * hfg, hf + (1 - dryness) * hfg),
    )


def _speed_pair(rng: random.Random) -> tuple[int, int, float]:
    n1 = rng.choice([1000, 1200, 1400, 1600, 1800])
    ratio = rng.choice([1.25, 1.5, 2])
    return n1, int(n1 * ratio), ratio


def affinity_flow(rng: random.Random) -> Worked:
    flow = rng.choice([20, 30, 40, 50, 60, 80])
    n1, n2, ratio = _speed_pair(rng)
    return Worked(
        {"flow": flow, "n1": n1, "n2": n2},
        flow * ratio,
        (flow * ratio**2, flow * ratio**3, flow / ratio),
    )


def affinity_head(rng: random.Random) -> Worked:
    head = rng.choice([20, 30, 40, 50, 60])
    n1, n2, ratio = _speed_pair(rng)
    return Worked(
        {"head": head, "n1": n1, "n2": n2, "ratio": ratio},
        head * ratio**2,
        (head * ratio, head * ratio**3, head / ratio**2),
    )


def hydraulic_power(rng: random.Random) -> Worked:
    flow = rng.choice([0.02, 0.03, 0.04, 0.05, 0.08, 0.1])
    head = rng.choice([20, 25, 30, 40, 50, 60])
    power = RHO_G_WATER * flow * head
    return Worked({"flow": flow, "head": head}, power, (power / 10, power * 10, flow * head))


def boiler_efficiency(rng: random.Random) -> Worked:
    heat_in = rng.choice([8000, 10000, 12000, 15000, 20000])
    percent = rng.choice([70, 75, 78, 80, 82, 85, 88])
    heat_out = heat_in * percent // 100
    return Worked(
        {"heat_in": heat_in, "heat_out": heat_out},
        heat_out / heat_in * 100,
        (heat_in / heat_out * 100, 100 - percent, heat_out / (heat_in + heat_out) * 100),
    )


def cycles_of_concentration(rng: random.Random) -> Worked:
    feed = rng.choice([100, 120, 150, 200, 250])
    cycles = rng.choice([10, 12, 15, 20, 25])
    boiler = feed * cycles
    return Worked({"feed": feed, "boiler": boiler}, cycles, (feed / boiler, cycles - 1, cycles + 1))


def npsh_available(rng: random.Random) -> Worked:
    atmospheric = rng.choice([10.0, 10.3])
    static = rng.choice([-3, -2, -1, 1, 2, 3, 4])
    friction = rng.choice([0.5, 1, 1.5, 2])
    vapour = rng.choice([0.2, 0.4, 0.6, 1.2])
    gross = atmospheric + static
    return Worked(
        {"atmospheric": atmospheric, "static": static, "friction": friction, "vapour": vapour},
        gross - friction - vapour,
        (gross - friction, gross - vapour, gross + friction - vapour),
    )


def blowdown_feed(rng: random.Random) -> Worked:
    steam = rng.choice([2000, 4000, 5000, 8000, 10000, 12000])
    percent = rng.choice([2, 3, 4, 5, 6, 8])
    share = percent / 100
    return Worked(
        {"steam": steam, "percent": percent, "keep": 1 - share},
        steam / (1 - share),
        (steam * (1 + share), steam, steam * (1 - share)),
    )


def brake_thermal_efficiency(rng: random.Random) -> Worked:
    brake = rng.choice([50, 75, 100, 120, 150])
    fuel = rng.choice([0.01, 0.012, 0.015, 0.02])
    heating = rng.choice([42000, 43000, 44000])
    supplied = fuel * heating
    efficiency = brake / supplied * 100
    return Worked(
        {"brake": brake, "fuel": fuel, "heating": heating, "supplied": supplied},
        efficiency,
        (efficiency / 10, 100 - efficiency, supplied / brake),
    )


def mechanical_efficiency(rng: random.Random) -> Worked:
    indicated = rng.choice([80, 100, 120, 150, 200, 250])
    percent = rng.choice([75, 80, 82, 85, 88, 90])
    brake = indicated * percent / 100
    return Worked(
        {"indicated": indicated, "brake": brake},
        percent,
        (indicated / brake * 100, 100 - percent, (indicated - brake) / brake * 100),
    )


def turbine_isentropic(rng: random.Random) -> Worked:
    inlet = rng.choice([3000, 3100, 3200, 3300, 3400])
    ideal_drop = rng.choice([600, 700, 800, 900, 1000])
    percent = rng.choice([70, 75, 80, 85, 90])
    actual_drop = ideal_drop * percent // 100
    return Worked(
        {
            "inlet": inlet,
            "outlet": inlet - actual_drop,
            "ideal_outlet": inlet - ideal_drop,
            "actual_drop": actual_drop,
            "ideal_drop": ideal_drop,
        },
        actual_drop / ideal_drop * 100,
        (ideal_drop / actual_drop * 100, 100 - percent, actual_drop / inlet * 100),
    )


def nozzle_velocity(rng: random.Random) -> Worked:
    drop = rng.choice([100, 150, 200, 250, 300, 400, 500])
    velocity = math.sqrt(2000 * drop)
    return Worked(
        {"drop": drop, "drop_j": drop * 1000},
        velocity,
        (math.sqrt(2 * drop), math.sqrt(1000 * drop), velocity * 0.9),
    )


def speed_regulation(rng: random.Random) -> Worked:
    full_load = rng.choice([1500, 1800, 3000, 3600])
    percent = rng.choice([2, 3, 4, 5, 6])
    no_load = full_load * (100 + percent) // 100
    return Worked(
        {"no_load": no_load, "full_load": full_load, "difference": no_load - full_load},
        percent,
        ((no_load - full_load) / no_load * 100, percent * 10, percent / 2),
    )


def theoretical_air_carbon(rng: random.Random) -> Worked:
    mass = rng.choice([1, 2, 5, 10, 20, 50])
    oxygen = mass * 32 / 12
    return Worked(
        {"mass": mass, "oxygen": oxygen},
        oxygen / OXYGEN_IN_AIR,
        (oxygen, oxygen / 0.21, mass * 34.5),
    )


def excess_air(rng: random.Random) -> Worked:
    theoretical = rng.choice([10, 11, 12, 12.5, 13, 14])
    percent = rng.choice([10, 15, 20, 25, 30, 40])
    actual = theoretical * (100 + percent) / 100
    return Worked(
        {"actual": actual, "theoretical": theoretical, "surplus": actual - theoretical},
        percent,
        ((actual - theoretical) / actual * 100, 100 + percent, theoretical / actual * 100),
    )


def proportional_band(rng: random.Random) -> Worked:
    band = rng.choice([20, 25, 40, 50, 80, 125, 200, 250, 400])
    return Worked({"band": band}, 100 / band, (band / 100, band, 50 / band))


def transmitter_reading(rng: random.Random) -> Worked:
    low = rng.choice([0, 0, 50, 100])
    span = rng.choice([100, 200, 250, 400, 500])
    signal = rng.randint(5, 19)
    reading = low + (signal - 4) / 16 * span
    return Worked(
        {"low": low, "high": low + span, "span": span, "signal": signal, "live": signal - 4},
        reading,
        (low + signal / 20 * span, low + (signal - 4) / 20 * span, low + signal / 16 * span),
    )


def fuel_energy(rng: random.Random) -> Worked:
    mass = rng.choice([200, 250, 500, 750, 1000, 1500])
    heating = rng.choice([24, 25, 28, 30, 32])
    megajoules = mass * heating
    return Worked(
        {"mass": mass, "heating": heating, "megajoules": megajoules},
        megajoules / 1000,
        (megajoules / 100, megajoules / 10000, megajoules / 3600),
    )


def carbon_dioxide(rng: random.Random) -> Worked:
    mass = rng.choice([1, 2, 3, 5, 10, 25])
    return Worked({"mass": mass}, mass * 44 / 12, (mass * 32 / 12, mass * 28 / 12, mass * 44 / 32))


def signal_at_span(rng: random.Random) -> Worked:
    percent = rng.choice([10, 20, 25, 30, 40, 50, 60, 70, 75, 80, 90])
    share = percent / 100
    return Worked({"percent": percent, "share": share}, 4 + 16 * share, (20 * share, 16 * share, 4 + 20 * share))


def three_phase_power(rng: random.Random) -> Worked:
    voltage = rng.choice([208, 480, 600, 4160])
    current = rng.choice([20, 50, 75, 100, 150, 200])
    power_factor = rng.choice([0.8, 0.85, 0.88, 0.9])
    single = voltage * current * power_factor / 1000
    return Worked(
        {"voltage": voltage, "current": current, "pf": power_factor},
        math.sqrt(3) * single,
        (single, math.sqrt(3) * voltage * current / 1000, 3 * single),
    )


def ohms_law(rng: random.Random) -> Worked:
    resistance = rng.choice([4, 8, 10, 12, 16, 24, 48])
    voltage = rng.choice([12, 24, 120, 208, 240, 480])
    current = voltage / resistance
    return Worked(
        {"voltage": voltage, "resistance": resistance},
        current,
        (voltage * resistance, resistance / voltage, current / 2),
    )


def resistive_loss(rng: random.Random) -> Worked:
    current = rng.choice([2, 4, 5, 8, 10, 15, 20])
    resistance = rng.choice([2, 3, 5, 8, 10, 12])
    return Worked(
        {"current": current, "resistance": resistance, "squared": current**2},
        current**2 * resistance,
        (current * resistance, current**2 / resistance, current * resistance**2),
    )


def refrigeration_cop(rng: random.Random) -> Worked:
    effect = rng.choice([120, 140, 150, 160, 180, 200])
    work = rng.choice([30, 40, 50, 60])
    cop = effect / work
    return Worked({"effect": effect, "work": work}, cop, (work / effect, cop + 1, cop - 1))


def tons_refrigeration(rng: random.Random) -> Worked:
    tons = rng.choice([5, 10, 15, 20, 25, 40, 50, 100])
    kilowatts = tons * KW_PER_TON_REFRIGERATION
    return Worked({"kw": kilowatts}, tons, (kilowatts * KW_PER_TON_REFRIGERATION, tons * 10, kilowatts / 12))


def compression_ratio(rng: random.Random) -> Worked:
    suction = rng.choice([90, 95, 100, 101])
    discharge = rng.choice([400, 500, 600, 700, 800, 1000])
    ratio = discharge / suction
    return Worked(
        {"suction": suction, "discharge": discharge},
        ratio,
        (suction / discharge, ratio - 1, (discharge + 100) / (suction + 100)),
    )


def volumetric_efficiency(rng: random.Random) -> Worked:
    displacement = rng.choice([0.5, 1.0, 1.5, 2.0, 2.5])
    percent = rng.choice([65, 70, 75, 80, 85, 90])
    delivered = displacement * percent / 100
    return Worked(
        {"displacement": displacement, "delivered": delivered},
        percent,
        (displacement / delivered * 100, 100 - percent, percent**2 / 100),
    )


def transformer_turns(rng: random.Random) -> Worked:
    primary, secondary = rng.choice([(4160, 480), (4160, 600), (13800, 4160), (600, 120), (480, 240), (2400, 240)])
    turns = rng.choice([500, 800, 1000, 1200, 1500])
    return Worked(
        {"primary": primary, "secondary": secondary, "turns": turns},
        turns * secondary / primary,
        (turns * primary / secondary, turns * (primary - secondary) / primary, turns * secondary / primary * 10),
    )


SOLVERS: dict[str, Solver] = {
    solver.__name__: solver
    for solver in (
        direct_stress,
        hoop_stress,
        lever_moment,
        kinetic_energy,
        sensible_heat,
        carnot,
        boyle,
        thermal_expansion,
        cycle_efficiency,
        wet_steam_enthalpy,
        affinity_flow,
        affinity_head,
        hydraulic_power,
        boiler_efficiency,
        cycles_of_concentration,
        npsh_available,
        blowdown_feed,
        brake_thermal_efficiency,
        mechanical_efficiency,
        turbine_isentropic,
        nozzle_velocity,
        speed_regulation,
        theoretical_air_carbon,
        excess_air,
        proportional_band,
        transmitter_reading,
        fuel_energy,
        carbon_dioxide,
        signal_at_span,
        three_phase_power,
        ohms_law,
        resistive_loss,
        refrigeration_cop,
        tons_refrigeration,
        compression_ratio,
        volumetric_efficiency,
        transformer_turns,
    )
}
