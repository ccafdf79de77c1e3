import enum


class Network(str, enum.Enum):
    MTN = "MTN"
    AIRTEL = "AIRTEL"
    GLO = "GLO"
    NINE_MOBILE = "9MOBILE"

    @property
    def label(self) -> str:
        return {
            Network.MTN: "MTN",
            Network.AIRTEL: "Airtel",
            Network.GLO: "Glo",
            Network.NINE_MOBILE: "9mobile",
        }[self]

    @classmethod
    def from_token(cls, token: str | None) -> "Network | None":
        """Maps free text like 'mtn', 'Airtel' or 'etisalat' to a network, None when unrecognized."""
        if not token:
            return None
        cleaned = token.strip().upper()
        if cleaned == "ETISALAT":
            return cls.NINE_MOBILE
        try:
            return cls(cleaned)
        except ValueError:
            return None
