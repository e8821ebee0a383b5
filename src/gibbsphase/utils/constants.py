"""Physical constants in SI units."""

R_gas_constant_si = 8.314462618  # J/(mol K)
reference_pressure_si = 1.0e5  # Pa (1 bar, IUPAC standard pressure)
reference_temperature = 298.15  # K
