"""Value Object Money - representa un valor monetario con su moneda."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """
    Value Object inmutable que representa un monto monetario.

    Attributes:
        amount: Monto decimal (hasta 2 decimales).
        currency_code: Código ISO 4217 de la moneda (ej: BRL, USD, EUR).
    """

    amount: Decimal
    currency_code: str

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, "amount", Decimal(str(self.amount)))
            except InvalidOperation as exc:
                raise ValueError(f"amount no es numérico: {self.amount}") from exc

        if len(self.currency_code) != 3:
            raise ValueError(f"currency_code debe ser de 3 caracteres: {self.currency_code}")

        if self.amount < 0:
            raise ValueError(f"amount no puede ser negativo: {self.amount}")

    def multiply(self, factor: int) -> "Money":
        """Multiplica por una cantidad entera y redondea a centavos."""
        total = (self.amount * factor).quantize(CENTS, rounding=ROUND_HALF_UP)
        return Money(amount=total, currency_code=self.currency_code)

    def is_positive(self) -> bool:
        return self.amount > Decimal("0")

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency_code}"

    @classmethod
    def of(cls, amount: Decimal | int | str, currency_code: str) -> "Money":
        """Crea un Money redondeado a centavos."""
        value = Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)
        return cls(amount=value, currency_code=currency_code)
