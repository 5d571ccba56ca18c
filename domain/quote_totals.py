"""Quote totals — pure functions, zero external dependencies.

Water TVA is computed once on the aggregate water HT; transport TVA is
computed per line and then summed. Both orders are kept as-is.
"""

from __future__ import annotations

from domain.models import ZERO, LigneCiterne, TotauxDevis, TotauxLigne
from domain.normalization import to_decimal


def _nombre(value, nom):
    """Decimal from int/float/str/Decimal; floats go through their repr."""
    nombre = to_decimal(value)
    if nombre is None:
        raise ValueError(f"{nom}: nombre attendu, reçu {value!r}")
    return nombre


def compute_line(ligne: LigneCiterne, prix_eau_ht, taux_tva_transport,
                 transport_price_resolver) -> TotauxLigne:
    """Per-line volume, water HT and transport HT/TVA."""
    prix_eau_ht = _nombre(prix_eau_ht, "prix_eau_ht")
    taux_tva_transport = _nombre(taux_tva_transport, "taux_tva_transport")
    volume = _nombre(ligne.volume_par_citerne, "volume_par_citerne")
    volume_ligne = ligne.nombre_citernes * volume
    eau_ht = volume_ligne * prix_eau_ht
    if ligne.inclure_transport:
        prix_transport = _nombre(
            transport_price_resolver(volume), "prix_transport"
        )
        transport_ht = ligne.nombre_citernes * prix_transport
        transport_tva = transport_ht * taux_tva_transport
    else:
        prix_transport = ZERO
        transport_ht = ZERO
        transport_tva = ZERO
    return TotauxLigne(
        volume_ligne=volume_ligne,
        eau_ht=eau_ht,
        prix_transport_unitaire_ht=prix_transport,
        transport_ht=transport_ht,
        transport_tva=transport_tva,
    )


def aggregate(lignes: list[TotauxLigne], taux_tva_eau) -> TotauxDevis:
    """Aggregate per-line breakdowns into quote totals."""
    taux_tva_eau = _nombre(taux_tva_eau, "taux_tva_eau")
    volume_total = sum((l.volume_ligne for l in lignes), ZERO)
    total_eau_ht = sum((l.eau_ht for l in lignes), ZERO)
    total_eau_tva = total_eau_ht * taux_tva_eau
    total_eau_ttc = total_eau_ht + total_eau_tva
    total_transport_ht = sum((l.transport_ht for l in lignes), ZERO)
    total_transport_tva = sum((l.transport_tva for l in lignes), ZERO)
    total_transport_ttc = total_transport_ht + total_transport_tva
    return TotauxDevis(
        volume_total=volume_total,
        total_eau_ht=total_eau_ht,
        total_eau_tva=total_eau_tva,
        total_eau_ttc=total_eau_ttc,
        total_transport_ht=total_transport_ht,
        total_transport_tva=total_transport_tva,
        total_transport_ttc=total_transport_ttc,
        total_ht=total_eau_ht + total_transport_ht,
        total_tva=total_eau_tva + total_transport_tva,
        total_ttc=total_eau_ttc + total_transport_ttc,
        lignes=tuple(lignes),
    )


def compute_totals(lignes, prix_eau_ht, taux_tva_eau, taux_tva_transport,
                   transport_price_resolver) -> TotauxDevis:
    """Compute per-line and aggregate HT/TVA/TTC totals.

    Args:
        lignes: LigneCiterne rows of the quote.
        prix_eau_ht: Water unit price per m³, excluding tax.
        taux_tva_eau: Water tax rate as a fraction.
        taux_tva_transport: Transport tax rate as a fraction.
        transport_price_resolver: Callable mapping a tank volume to the
            transport unit price; only called for lines including transport.
    """
    details = [
        compute_line(l, prix_eau_ht, taux_tva_transport, transport_price_resolver)
        for l in lignes
    ]
    return aggregate(details, taux_tva_eau)


def totals_from_snapshot(lignes: list[LigneCiterne]) -> TotauxDevis:
    """Recompute totals from the price snapshot persisted on each line.

    Water price and rates are shared by every line of a quote, so the first
    line's snapshot drives the aggregate water TVA.
    """
    if not lignes:
        return TotauxDevis()
    premiere = lignes[0]
    details = [
        compute_line(
            l,
            l.prix_unitaire_m3_ht or ZERO,
            l.taux_tva_transport or ZERO,
            lambda _volume, prix=l.prix_transport_unitaire_ht or ZERO: prix,
        )
        for l in lignes
    ]
    return aggregate(details, premiere.taux_tva_eau or ZERO)
