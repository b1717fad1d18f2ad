"""Centralized risk patterns & keyword maps.

Pattern groups are keyed by severity, then by category. Every entry is a
regular expression matched case-insensitively against clause text.
"""

RISK_PATTERNS = {
    # Red flags
    "HIGH": {
        "data-privacy": [
            r"sell your data",
            r"sell your information",
            r"monetize.*data",
            r"share.*third.{0,10}part",
            r"disclose.*personal information",
            r"transfer.*data.*affiliate",
        ],
        "arbitration": [
            r"forced arbitration",
            r"binding arbitration",
            r"waive.*right.*class action",
            r"waive.*right.*jury trial",
            r"mandatory arbitration",
        ],
        "payment": [
            r"non-refundable",
            r"no refund",
            r"cannot cancel",
            r"auto.{0,5}renew",
            r"automatically.*renew",
            r"renewal.*automatic",
        ],
        "rights": [
            r"waive.*right",
            r"surrender.*right",
            r"forfeit.*right",
            r"relinquish.*claim",
            r"irrevocable.*license",
        ],
        "liability": [
            r"unlimited liability",
            r"no warranty",
            r"disclaim.*all.*warrant",
            r"not responsible.*loss",
            r"assume.*all.*risk",
        ],
        "modification": [
            r"change.*without notice",
            r"modify.*sole discretion",
            r"alter.*any time",
            r"unilateral.*change",
        ],
    },
    # Yellow flags
    "MEDIUM": {
        "data-retention": [
            r"retain.*indefinitely",
            r"store.*data.*period",
            r"keep.*information",
            r"data retention",
        ],
        "termination": [
            r"terminate.*access",
            r"suspend.*account",
            r"disable.*service",
            r"close.*account.*discretion",
        ],
        "liability": [
            r"limited liability",
            r"as-is basis",
            r"with all faults",
            r"no guarantee",
            r"best effort",
        ],
        "modification": [
            r"may change",
            r"reserve.*right.*modify",
            r"update.*time to time",
            r"subject to change",
        ],
        "third-party": [
            r"third.{0,5}party",
            r"partner.*service",
            r"affiliate.*share",
            r"vendor.*access",
        ],
    },
    # Green flags (positive indicators)
    "LOW": {
        "transparency": [
            r"will notify you",
            r"notice.*change",
            r"inform.*advance",
            r"prior.*notification",
        ],
        "rights": [
            r"right to cancel",
            r"opt.{0,5}out",
            r"unsubscribe",
            r"delete.*account",
            r"access.*data",
        ],
        "compliance": [
            r"GDPR",
            r"CCPA",
            r"privacy.*compliance",
            r"data protection",
            r"security measures",
        ],
    },
}

# Specific pattern -> reader-facing explanation
PATTERN_REASONS = {
    r"sell your data": "Your personal data may be sold to third parties",
    r"share.*third.{0,10}part": "Information may be shared with third parties",
    r"third.{0,5}party": "Information may be shared with third parties",
    r"auto.{0,5}renew": "Automatic renewal without easy cancellation",
    r"non-refundable": "You cannot get your money back",
    r"no refund": "You cannot get your money back",
    r"forced arbitration": "You give up your right to sue in court",
    r"binding arbitration": "Disputes go to private arbitration instead of court",
    r"terminate.*access": "They can terminate your access at any time",
    r"GDPR": "Complies with GDPR data protection",
    r"right to cancel": "You have the right to cancel",
    r"opt.{0,5}out": "You can opt out",
}

# (severity, category) -> explanation used when the pattern itself is unmapped
CATEGORY_REASONS = {
    ("HIGH", "data-privacy"): "Your personal data may leave the company's hands",
    ("HIGH", "arbitration"): "You may lose access to courts or class actions",
    ("HIGH", "payment"): "Charges may be hard to stop or recover",
    ("HIGH", "rights"): "You are asked to give up legal rights",
    ("HIGH", "liability"): "The company disclaims responsibility for losses",
    ("HIGH", "modification"): "Terms can change without your agreement",
    ("MEDIUM", "termination"): "Your account can be suspended or closed",
    ("MEDIUM", "data-retention"): "Your data may be kept for a long time",
    ("LOW", "compliance"): "Mentions recognized data protection standards",
}

# Clause category -> typical keywords (used when no model is available)
CATEGORY_KEYWORDS = {
    "data-privacy": ["data", "information", "privacy", "personal", "collect", "process", "store"],
    "payment": ["payment", "fee", "charge", "price", "subscription", "billing", "refund"],
    "cancellation": ["cancel", "terminate", "close", "discontinue", "withdrawal"],
    "arbitration": ["arbitration", "dispute", "resolution", "mediation", "litigation", "court"],
    "liability": ["liability", "responsible", "warranty", "guarantee", "damages", "indemnify"],
    "intellectual-property": ["intellectual property", "copyright", "trademark", "patent", "license", "ownership"],
    "termination": ["termination", "suspension", "account", "access", "disable", "revoke"],
    "modification": ["modification", "change", "update", "amend", "revise", "alter"],
}
