"""Vocabulary used by description normalization and transfer detection."""

# Banking shorthand and Portuguese/English connectives that carry no
# merchant signal.
BANK_STOPWORDS: frozenset[str] = frozenset(
    {
        # Payment rails and statement shorthand
        "pix", "ted", "doc", "tev", "transf", "deb", "cred", "pag", "rec",
        "ref", "nr", "num", "nf", "cp", "dp",
        # Portuguese connectives
        "de", "para", "em", "do", "da", "dos", "das", "o", "a", "os", "as",
        "e", "ou", "que", "com", "por", "no", "na", "nos", "nas", "um", "uma",
        "uns", "umas",
        # English connectives
        "the", "of", "and", "at", "via",
    }
)

# Raw tokens that signal money moving between accounts. A single-token account
# alias only counts as a transfer when one of these is present.
TRANSFER_CUES: frozenset[str] = frozenset(
    {
        "pix", "ted", "doc", "tev", "transf", "transferencia", "transfer",
        "transferencias", "aplicacao", "resgate",
    }
)

# Phrases that identify internal movements regardless of the organization's
# accounts, such as paying the company's own credit card bill.
TRANSFER_PHRASES: tuple[str, ...] = (
    "pagamento fatura",
    "pgto fatura",
    "pgto cartao",
    "pagamento cartao",
    "fatura cartao",
    "liq fatura",
    "liquidacao cartao",
    "transferencia entre contas",
    "transferencia mesma titularidade",
    "credit card payment",
    "card bill payment",
    "transfer between accounts",
    "own account transfer",
)
