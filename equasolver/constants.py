"""Catalog of mathematical and physical constants.

The catalog is built once at import and exposed as a read-only mapping.
Keys are the short upper-case names used inside expressions (``SOL`` for
the speed of light, ``PC`` for Planck's constant); lookups are
case-insensitive.
"""

import math
from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class PhysicalConstant:
    key: str
    value: float
    name: str
    unit: str
    symbol: str
    category: str


_ROWS = [
    # key, value, name, unit, symbol, category
    ("PI", 3.14159265358979323846, "Pi", "", "π", "mathematical"),
    ("EN", 2.718281828459045, "Euler's Number", "", "e", "mathematical"),
    ("IN", math.nan, "Imaginary Unit", "", "i", "mathematical"),
    ("PHI", 1.618033988749895, "Golden Ratio", "", "φ", "mathematical"),
    ("SQRT2", 1.4142135623730951, "Square Root of 2", "", "√2", "mathematical"),

    ("SOL", 299792458.0, "Speed of Light", "m/s", "c", "fundamental"),
    ("PC", 6.62607015e-34, "Planck Constant", "J⋅s", "h", "fundamental"),
    ("HBAR", 1.054571817e-34, "Reduced Planck Constant", "J⋅s", "ħ", "fundamental"),
    ("GC", 6.67430e-11, "Gravitational Constant", "N⋅m²/kg²", "G", "fundamental"),

    ("EC", 1.602176634e-19, "Elementary Charge", "C", "e", "electromagnetic"),
    ("VP", 8.8541878128e-12, "Vacuum Permittivity", "F/m", "ε₀", "electromagnetic"),
    ("VPM", 1.25663706212e-6, "Vacuum Permeability", "H/m", "μ₀", "electromagnetic"),
    ("CC", 8.9875517923e9, "Coulomb Constant", "N⋅m²/C²", "k", "electromagnetic"),

    ("ME", 9.1093837015e-31, "Electron Mass", "kg", "mₑ", "atomic"),
    ("MP", 1.67262192369e-27, "Proton Mass", "kg", "mₚ", "atomic"),
    ("MN", 1.67492749804e-27, "Neutron Mass", "kg", "mₙ", "atomic"),
    ("BR", 5.29177210903e-11, "Bohr Radius", "m", "a₀", "atomic"),
    ("FSC", 7.2973525693e-3, "Fine Structure Constant", "", "α", "atomic"),
    ("RYD", 10973731.568160, "Rydberg Constant", "1/m", "R∞", "atomic"),
    ("BM", 9.2740100783e-24, "Bohr Magneton", "J/T", "μB", "atomic"),
    ("NM", 5.0507837461e-27, "Nuclear Magneton", "J/T", "μN", "atomic"),
    ("PEM", 1836.15267343, "Proton-Electron Mass Ratio", "", "mp/me", "atomic"),

    ("FC", 96485.33212, "Faraday Constant", "C/mol", "F", "electrochemical"),

    ("MFQ", 2.067833848e-15, "Magnetic Flux Quantum", "Wb", "Φ₀", "quantum"),
    ("CQ", 7.748091729e-5, "Conductance Quantum", "S", "G₀", "quantum"),
    ("JC", 483597.8484e9, "Josephson Constant", "Hz/V", "KJ", "quantum"),
    ("VK", 25812.8074593043, "Von Klitzing Constant", "Ω", "RK", "quantum"),

    ("WIE", 2.897771955e-3, "Wien Displacement Constant", "m⋅K", "b", "thermodynamic"),
    ("C1", 3.741771852e-16, "First Radiation Constant", "W⋅m²", "c₁", "thermodynamic"),
    ("C2", 1.438776877e-2, "Second Radiation Constant", "m⋅K", "c₂", "thermodynamic"),
    ("BC", 1.380649e-23, "Boltzmann Constant", "J/K", "kB", "thermodynamic"),
    ("AN", 6.02214076e23, "Avogadro Number", "1/mol", "NA", "thermodynamic"),
    ("RG", 8.314462618, "Gas Constant", "J/(mol⋅K)", "R", "thermodynamic"),
    ("ATM", 101325.0, "Standard Atmosphere", "Pa", "atm", "thermodynamic"),
    ("SBC", 5.670374419e-8, "Stefan-Boltzmann Constant", "W/(m²⋅K⁴)", "σ", "thermodynamic"),

    ("SG", 9.80665, "Standard Gravity", "m/s²", "g", "earth"),
    ("EM", 5.972e24, "Earth Mass", "kg", "M⊕", "earth"),
    ("ER", 6.371e6, "Earth Radius", "m", "R⊕", "earth"),

    ("SM", 1.989e30, "Sun Mass", "kg", "M☉", "celestial"),
    ("SR", 6.96e8, "Sun Radius", "m", "R☉", "celestial"),
    ("AU", 1.495978707e11, "Astronomical Unit", "m", "AU", "celestial"),
    ("LY", 9.4607e15, "Light Year", "m", "ly", "celestial"),
]

CATALOG = MappingProxyType({row[0]: PhysicalConstant(*row) for row in _ROWS})


def lookup(key: str) -> PhysicalConstant | None:
    """Find a constant by key, ignoring case."""
    return CATALOG.get(key.upper())


def categories() -> list[str]:
    """Category names in catalog order."""
    seen = []
    for constant in CATALOG.values():
        if constant.category not in seen:
            seen.append(constant.category)
    return seen


def by_category(category: str) -> list[PhysicalConstant]:
    return [c for c in CATALOG.values() if c.category == category.lower()]


def search(query: str) -> list[PhysicalConstant]:
    """Constants whose key, name or symbol contains *query* (case-insensitive)."""
    needle = query.strip().lower()
    if not needle:
        return []
    return [
        c for c in CATALOG.values()
        if needle in c.key.lower() or needle in c.name.lower() or needle in c.symbol.lower()
    ]


def prefill(names) -> dict[str, float]:
    """Catalog values for every name in *names* that is a known constant.

    Entries without a real value (the imaginary unit) are skipped.
    """
    values = {}
    for name in names:
        constant = lookup(name)
        if constant is None or math.isnan(constant.value):
            continue
        values[name] = constant.value
    return values
