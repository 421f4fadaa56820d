"""
Utilitários de formatação para exibição
"""
from typing import Optional, Union
from datetime import datetime
from decimal import Decimal

EMPTY_VALUE = '—'


def format_currency(value: Optional[Union[float, int, Decimal]]) -> str:
    """
    Formatar valor monetário para Real brasileiro

    Args:
        value: Valor a ser formatado

    Returns:
        String formatada (ex: R$ 1.234,56). Valores nulos ou zero viram '—'
    """
    if not value:
        return EMPTY_VALUE

    # Formatar com 2 casas decimais
    formatted = f"R$ {float(value):,.2f}"

    # Trocar . por , (padrão brasileiro)
    formatted = formatted.replace(",", "X").replace(".", ",").replace("X", ".")

    return formatted


def format_date(date: datetime, include_time: bool = False) -> str:
    """
    Formatar data para padrão brasileiro

    Args:
        date: Data a ser formatada
        include_time: Se deve incluir horário

    Returns:
        String formatada (ex: 17/06/2025 ou 17/06/2025 14:30)
    """
    if not date:
        return "N/A"

    if include_time:
        return date.strftime("%d/%m/%Y %H:%M")
    return date.strftime("%d/%m/%Y")
