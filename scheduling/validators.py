from __future__ import annotations

import re

from .errors import InvalidIdentifier, ValidationError


EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\d{10,11}$")
CPF_RE = re.compile(r"^[0-9]{11}$")


def only_digits(value: str) -> str:
    return re.sub(r"\D+", "", value or "")


def cpf_digits(value: str) -> str:
    """Drop the usual CPF punctuation (dots, dash, spaces); anything else is kept."""
    return re.sub(r"[.\-\s]+", "", value or "")


def _check_digit(digits: str, weight: int) -> int:
    total = sum(int(d) * w for d, w in zip(digits, range(weight, 1, -1)))
    rest = (total * 10) % 11
    return 0 if rest == 10 else rest


def is_valid_cpf(value: str) -> bool:
    """
    Two weighted checksum passes over the 11 digits: weights 10..2 on the
    first nine give digit ten, weights 11..2 on the first ten give digit
    eleven. Sequences of one repeated digit pass the checksum but are not
    issued, so they are rejected too.
    """
    digits = cpf_digits(value)
    if not CPF_RE.match(digits) or digits == digits[0] * 11:
        return False
    if _check_digit(digits[:9], 10) != int(digits[9]):
        return False
    return _check_digit(digits[:10], 11) == int(digits[10])


def normalize_cpf(value: str) -> str:
    if not is_valid_cpf(value):
        raise InvalidIdentifier("CPF inválido.")
    return cpf_digits(value)


def format_cpf(digits: str) -> str:
    if len(digits) != 11:
        return digits
    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"


def validate_email(value: str) -> str:
    value = (value or "").strip()
    if not EMAIL_RE.match(value):
        raise ValidationError("E-mail inválido.")
    return value


def normalize_phone(value: str) -> str:
    digits = only_digits(value)
    if not PHONE_RE.match(digits):
        raise ValidationError("Telefone inválido. Informe DDD e número (10 ou 11 dígitos).")
    return digits
