# All the frequencies are in Hz.

# High speed dividers.  Prefer larger values, they use less power.
N1_HS_VALUES = range(11, 3, -1)
N2_HS_VALUES = range(11, 3, -1)

# Low speed output dividers NC1_LS & NC2_LS must be even (or one, but see
# is_in_ncx_ls_range) and at most this.
NCN_LS_MAX = 1 << 20

# The N2_LS feedback divider must be even and at most this.
N2_LS_MAX = 1 << 20

# The N31 divider in front of the phase detector.
N31_MAX = 1 << 19

# Source: Silicon Labs Si53xx-RM Rev. 1.3, Table 26
VCO_LO = 4_850_000_000
VCO_HI = 5_670_000_000
F3_LO = 2_000
F3_HI = 2_000_000

# Source: ublox MAX-M8 series data sheet
GPS_HI = 10_000_000

# All the hardware registers we fill in are 32 bits.
REGISTER_MAX = (1 << 32) - 1
