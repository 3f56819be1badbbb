"""
Enumerated ESPI codes -> human readable labels.

The linker only depends on the ``CodeLookup`` protocol; ``StaticCodeLookup``
is the default implementation backed by the tables below (ESPI ``appinfo``
labels keyed by ``(scope, field, code)``).
"""

from __future__ import annotations

from typing import Dict, Iterable, NamedTuple, Optional, Protocol, Tuple

from . import canon

MISSING_LABEL = "Missing app info"
MISSING_DESCRIPTION = "Missing description"


class CodeDetails(NamedTuple):
    label: str
    description: str


class CodeLookup(Protocol):
    def lookup(self, scope: str, field: str, code: int) -> CodeDetails: ...


QUALITY_OF_READING: Dict[int, str] = {
    0: "valid",
    7: "manually edited",
    8: "estimated using reference day",
    9: "estimated using linear interpolation",
    10: "questionable",
    11: "derived",
    12: "projected (forecast)",
    13: "mixed",
    14: "raw",
    15: "normalized for weather",
    16: "other",
    17: "validated",
    18: "verified",
    19: "revenue-quality",
}

ACCUMULATION_KIND: Dict[int, str] = {
    0: "none",
    1: "bulkQuantity",
    2: "continuousCumulative",
    3: "cumulative",
    4: "deltaData",
    6: "indicating",
    9: "summation",
    10: "timeDelta",
    12: "instantaneous",
    13: "latchingQuantity",
    14: "boundedQuantity",
}

COMMODITY_KIND: Dict[int, str] = {
    0: "none",
    1: "electricity SecondaryMetered",
    2: "electricity PrimaryMetered",
    3: "communication",
    4: "air",
    5: "insulativeGas",
    6: "insulativeOil",
    7: "naturalGas",
    8: "propane",
    9: "potableWater",
    10: "steam",
    11: "wasteWater",
    12: "heatingFluid",
    13: "coolingFluid",
    14: "nonpotableWater",
    15: "nox",
    16: "so2",
    17: "ch4",
    18: "co2",
    19: "carbon",
    20: "hch",
    21: "pfc",
    22: "sf6",
    23: "tvLicense",
    24: "internet",
    25: "refuse",
}

CURRENCY: Dict[int, str] = {
    0: "none",
    36: "AUD",
    124: "CAD",
    156: "CNY",
    208: "DKK",
    356: "INR",
    392: "JPY",
    484: "MXN",
    554: "NZD",
    578: "NOK",
    710: "ZAR",
    752: "SEK",
    756: "CHF",
    826: "GBP",
    840: "USD",
    978: "EUR",
    986: "BRL",
}

DATA_QUALIFIER_KIND: Dict[int, str] = {
    0: "none",
    2: "average",
    4: "excess",
    5: "highThreshold",
    7: "lowThreshold",
    8: "maximum",
    9: "minimum",
    11: "nominal",
    12: "normal",
    16: "secondMaximum",
    17: "secondMinimum",
    23: "thirdMaximum",
    24: "fourthMaximum",
    25: "fifthMaximum",
    26: "sum",
}

FLOW_DIRECTION_KIND: Dict[int, str] = {
    0: "none",
    1: "forward",
    2: "lagging",
    3: "leading",
    4: "net",
    5: "q1plusQ2",
    7: "q1plusQ3",
    8: "q1plusQ4",
    9: "q1minusQ4",
    10: "q2plusQ3",
    11: "q2plusQ4",
    12: "q2minusQ3",
    13: "q3plusQ4",
    14: "q3minusQ2",
    15: "quadrant1",
    16: "quadrant2",
    17: "quadrant3",
    18: "quadrant4",
    19: "reverse",
    20: "total",
    21: "totalByPhase",
}

MEASUREMENT_KIND: Dict[int, str] = {
    0: "none",
    2: "apparentPowerFactor",
    3: "currency",
    4: "current",
    5: "currentAngle",
    6: "currentImbalance",
    7: "date",
    8: "demand",
    9: "distance",
    10: "distortionVoltAmperes",
    11: "energization",
    12: "energy",
    13: "energizationLoadSide",
    14: "fan",
    15: "frequency",
    16: "funds",
    17: "ieee1366ASAI",
    18: "ieee1366ASIDI",
    19: "ieee1366ASIFI",
    20: "ieee1366CAIDI",
    21: "ieee1366CAIFI",
    22: "ieee1366CEMIn",
    23: "ieee1366CEMSMIn",
    24: "ieee1366CTAIDI",
    25: "ieee1366MAIFI",
    26: "ieee1366MAIFIe",
    27: "ieee1366SAIDI",
    28: "ieee1366SAIFI",
    31: "lineLosses",
    32: "losses",
    33: "negativeSequence",
    34: "phasorPowerFactor",
    35: "phasorReactivePower",
    36: "positiveSequence",
    37: "power",
    38: "powerFactor",
    40: "quantityPower",
    41: "sag",
    42: "swell",
    43: "switchPosition",
    44: "tapPosition",
    45: "tariffRate",
    46: "temperature",
    47: "totalHarmonicDistortion",
    48: "transformerLosses",
    49: "unipedeVoltageDip10to15",
    50: "unipedeVoltageDip15to30",
    51: "unipedeVoltageDip30to60",
    52: "unipedeVoltageDip60to90",
    53: "unipedeVoltageDip90to100",
    54: "voltage",
    55: "voltageAngle",
    56: "voltageExcursion",
    57: "voltageImbalance",
    58: "volume",
    59: "zeroFlowDuration",
    60: "zeroSequence",
    64: "distortionPowerFactor",
    81: "frequencyExcursion",
    90: "applicationContext",
    91: "apTitle",
    92: "assetNumber",
    93: "bandwidth",
    94: "batteryVoltage",
    95: "broadcastAddress",
    96: "deviceAddressType1",
    97: "deviceAddressType2",
    98: "deviceAddressType3",
    99: "deviceAddressType4",
    100: "deviceClass",
    101: "electronicSerialNumber",
    102: "endDeviceID",
    103: "groupAddressType1",
    104: "groupAddressType2",
    105: "groupAddressType3",
    106: "groupAddressType4",
    107: "ipAddress",
    108: "macAddress",
    109: "mfgAssignedConfigurationID",
    110: "mfgAssignedPhysicalSerialNumber",
    111: "mfgAssignedProductNumber",
    112: "mfgAssignedUniqueCommunicationAddress",
    113: "multiCastAddress",
    114: "oneWayAddress",
    115: "signalStrength",
    116: "twoWayAddress",
    117: "signaltoNoiseRatio",
    118: "alarm",
    119: "batteryCarryover",
    120: "dataOverflowAlarm",
    121: "demandLimit",
    122: "demandReset",
    123: "diagnostic",
    124: "emergencyLimit",
    125: "encoderTamper",
    126: "ieee1366MomentaryInterruption",
    127: "ieee1366MomentaryInterruptionEvent",
    128: "ieee1366SustainedInterruption",
    129: "interruptionBehaviour",
    130: "inversionTamper",
    131: "loadInterrupt",
    132: "loadShed",
    133: "maintenance",
    134: "physicalTamper",
    135: "powerLossTamper",
    136: "powerOutage",
    137: "powerQuality",
    138: "powerRestoration",
    139: "programmed",
    140: "pushbutton",
    141: "relayActivation",
    142: "relayCycle",
    143: "removalTamper",
    144: "reprogrammingTamper",
    145: "reverseRotationTamper",
    146: "switchArmed",
    147: "switchDisabled",
    148: "tamper",
    149: "watchdogTimeout",
    150: "billLastPeriod",
    151: "billToDate",
    152: "billCarryover",
    153: "connectionFee",
    154: "audibleVolume",
    155: "volumetricFlow",
}

PHASE_CODE_KIND: Dict[int, str] = {
    0: "none",
    16: "N",
    32: "C",
    33: "CN",
    41: "ACN",
    64: "B",
    65: "BN",
    66: "BC",
    96: "AC",
    97: "BCN",
    128: "A",
    129: "AN",
    132: "AB",
    193: "ABN",
    224: "ABC",
    225: "ABCN",
    256: "s2",
    272: "s2N",
    512: "s1",
    528: "s1N",
    768: "s12",
    784: "s12N",
}

UNIT_SYMBOL_KIND: Dict[int, str] = {
    0: "none",
    2: "m",
    3: "g",
    4: "revPerSec",
    5: "A",
    6: "K",
    7: "mol",
    8: "cd",
    9: "deg",
    10: "rad",
    11: "sr",
    21: "gy",
    22: "bq",
    23: "degC",
    24: "sv",
    25: "F",
    27: "sec",
    28: "H",
    29: "V",
    30: "ohm",
    31: "J",
    32: "n",
    33: "Hz",
    34: "lx",
    35: "lm",
    36: "wb",
    37: "t",
    38: "W",
    39: "pa",
    41: "m2",
    42: "m3",
    43: "mPerSec",
    44: "mPerSec2",
    45: "m3PerSec",
    46: "mPerM3",
    47: "kgM",
    48: "kgPerM3",
    49: "m2PerSec",
    50: "wPerMK",
    51: "jPerK",
    53: "siemens",
    54: "radPerSec",
    61: "VA",
    63: "VAr",
    65: "cosTheta",
    66: "Vs",
    67: "V2",
    68: "As",
    69: "A2",
    70: "A2s",
    71: "VAh",
    72: "Wh",
    73: "VArh",
    74: "VPerHz",
    75: "HzPerSec",
    76: "char",
    77: "charPerSec",
    78: "gM2",
    79: "b",
    80: "money",
    81: "WPerSec",
    82: "litrePerSec",
    100: "q",
    101: "qh",
    102: "ohmM",
    103: "APerM",
    104: "V2h",
    105: "A2h",
    106: "Ah",
    107: "WhPerM3",
    108: "timeStamp",
    109: "status",
    111: "count",
    113: "bm",
    114: "code",
    115: "WhPerRev",
    116: "VArhPerRev",
    117: "VAhPerRev",
    118: "meCode",
    119: "ft3",
    120: "ft3compensated",
    123: "ft3compensatedPerH",
    125: "m3PerH",
    126: "m3compensatedPerH",
    127: "m3uncompensatedPerH",
    128: "usGal",
    129: "usGalPerH",
    130: "imperialGal",
    131: "imperialGalPerH",
    132: "btu",
    133: "btuPerH",
    134: "litre",
    137: "litrePerH",
    138: "litreCompensatedPerH",
    139: "litreUncompensatedPerH",
    140: "paG",
    141: "psiA",
    142: "psiG",
    143: "litrePerLitre",
    144: "gPerG",
    145: "molPerM3",
    146: "molPerMol",
    147: "molPerKg",
    148: "mPerM",
    149: "secPerSec",
    150: "HzPerHz",
    151: "VPerV",
    152: "APerA",
    153: "WPerVA",
    154: "rev",
    155: "paA",
    156: "litreUncompensated",
    157: "litreCompensated",
    158: "kat",
    159: "min",
    160: "h",
    161: "q45",
    162: "q60",
    163: "q45h",
    164: "q60h",
    165: "jPerKg",
    166: "m3uncompensated",
    167: "m3compensated",
    168: "WPerW",
    169: "therm",
}

# Longer documentation for the codes most feeds actually use.
DESCRIPTIONS: Dict[Tuple[str, str, int], str] = {
    ("", "QualityOfReading", 0): "data that has gone through all required validation checks and either passed them all or has been verified",
    ("", "QualityOfReading", 7): "Replaced or approved by a human",
    ("", "QualityOfReading", 8): "data value was replaced by a machine computed value based on analysis of historical data using the same type of measurement",
    ("", "QualityOfReading", 9): "data value was computed using linear interpolation based on the readings before and after it",
    ("", "QualityOfReading", 10): "data that has failed one or more checks",
    ("", "QualityOfReading", 11): "data that has been calculated (using logic or mathematical operations), not necessarily measured directly",
    ("", "QualityOfReading", 12): "data that has been calculated as a projection or forecast of future readings",
    ("", "QualityOfReading", 13): "indicates that the quality of this reading has mixed characteristics",
    ("", "QualityOfReading", 14): "data that has not gone through the validation, editing and estimation process",
    ("", "QualityOfReading", 15): "Values have been adjusted to account for weather",
    ("", "QualityOfReading", 16): "specifies that a characteristic applies other than those defined",
    ("", "QualityOfReading", 17): "data that has been validated and possibly edited and/or estimated in accordance with approved procedures",
    ("", "QualityOfReading", 18): "data that failed at least one of the required validation checks but was determined to represent actual usage",
    ("", "QualityOfReading", 19): "data that has gone through all required validation checks and either passed them all or has been verified",
    ("ReadingType", "accumulationBehaviour", 1): "A value from a register which represents the bulk quantity of a commodity.",
    ("ReadingType", "accumulationBehaviour", 3): "The sum of the previous billing period values and the present period value.",
    ("ReadingType", "accumulationBehaviour", 4): "The difference between the value at the end of the prescribed interval and the beginning of the interval.",
    ("ReadingType", "accumulationBehaviour", 6): "As if a needle is swung out on the meter face to a value to indicate the current value.",
    ("ReadingType", "accumulationBehaviour", 9): "A form of accumulation which is selective with respect to time.",
    ("ReadingType", "accumulationBehaviour", 12): "Typically measured over the fastest period of time allowed by the definition of the metric.",
    ("ReadingType", "commodity", 1): "All types of metered quantities. This type of reading comes from the meter and represents a secondary metered value.",
    ("ReadingType", "commodity", 2): "It is possible for a meter to be outfitted with an external VT and/or CT. The meter might not be aware of these devices, and the display not compensate for their presence.",
    ("ReadingType", "commodity", 7): "Natural gas",
    ("ReadingType", "commodity", 9): "Drinkable water",
    ("ReadingType", "currency", 36): "Australian Dollar",
    ("ReadingType", "currency", 124): "Canadian Dollar",
    ("ReadingType", "currency", 840): "US Dollar",
    ("ReadingType", "currency", 978): "European Euro",
    ("ReadingType", "dataQualifier", 0): "Not Applicable",
    ("ReadingType", "dataQualifier", 2): "Average value",
    ("ReadingType", "dataQualifier", 8): "The highest value observed",
    ("ReadingType", "dataQualifier", 12): "normal",
    ("ReadingType", "flowDirection", 0): "Not Applicable (N/A)",
    ("ReadingType", "flowDirection", 1): "\"Delivered,\" or \"Imported\" as defined 61968-2. Forward Active Energy is a positive kWh value as one would naturally expect to find as energy is supplied by the utility and consumed at the service.",
    ("ReadingType", "flowDirection", 4): "|Forward| - |Reverse|, See 61968-2.",
    ("ReadingType", "flowDirection", 19): "\"Received,\" or \"Exported\" as defined 61968-2. Reverse Active Energy is equivalent to \"Received,\" or \"Exported\" as defined in 61968-2.",
    ("ReadingType", "flowDirection", 20): "|Forward| + |Reverse|, See 61968-2.",
    ("ReadingType", "kind", 0): "Not Applicable",
    ("ReadingType", "kind", 8): "Demand",
    ("ReadingType", "kind", 12): "Energy",
    ("ReadingType", "kind", 37): "Power",
    ("ReadingType", "kind", 58): "Volume",
    ("ReadingType", "phase", 0): "Not applicable to any phase",
    ("ReadingType", "phase", 225): "ABC to Neutral",
    ("ReadingType", "phase", 768): "Phase S1 to S2",
    ("ReadingType", "uom", 0): "Not Applicable",
    ("ReadingType", "uom", 38): "Real power in Watts",
    ("ReadingType", "uom", 42): "Cubic meter",
    ("ReadingType", "uom", 72): "Real energy in Watt hours",
    ("ReadingType", "uom", 119): "Cubic feet",
    ("ReadingType", "uom", 169): "Energy, Therms",
}

TABLES: Dict[Tuple[str, str], Dict[int, str]] = {
    (canon.QUALITY_SCOPE, canon.QUALITY_FIELD): QUALITY_OF_READING,
    ("ReadingType", "accumulationBehaviour"): ACCUMULATION_KIND,
    ("ReadingType", "commodity"): COMMODITY_KIND,
    ("ReadingType", "currency"): CURRENCY,
    ("ReadingType", "dataQualifier"): DATA_QUALIFIER_KIND,
    ("ReadingType", "flowDirection"): FLOW_DIRECTION_KIND,
    ("ReadingType", "kind"): MEASUREMENT_KIND,
    ("ReadingType", "phase"): PHASE_CODE_KIND,
    ("ReadingType", "uom"): UNIT_SYMBOL_KIND,
}


class StaticCodeLookup:
    """CodeLookup over in-memory tables; unknown codes map to the 'Missing ...' sentinels."""

    def __init__(
        self,
        tables: Optional[Dict[Tuple[str, str], Dict[int, str]]] = None,
        descriptions: Optional[Dict[Tuple[str, str, int], str]] = None,
    ):
        self.tables = TABLES if tables is None else tables
        self.descriptions = DESCRIPTIONS if descriptions is None else descriptions

    def lookup(self, scope: str, field: str, code: int) -> CodeDetails:
        label = self.tables.get((scope, field), {}).get(int(code))
        if label is None:
            return CodeDetails(MISSING_LABEL, MISSING_DESCRIPTION)
        return CodeDetails(label, self.descriptions.get((scope, field, int(code)), label))


DEFAULT_LOOKUP = StaticCodeLookup()


def enums_to_strings(
    lookup: CodeLookup, scope: str, field: str, values: Iterable[int]
) -> list[str]:
    """Resolve a column of codes to labels through any CodeLookup."""
    cache: Dict[int, str] = {}
    out: list[str] = []
    for v in values:
        code = int(v)
        if code not in cache:
            cache[code] = lookup.lookup(scope, field, code).label
        out.append(cache[code])
    return out
