"""
Emission narrative generation.

Two interchangeable generators: the remote one asks the AI gateway for a short
Indonesian analysis paragraph, the local one builds a deterministic paragraph
from the numbers. generate_narrative() always returns text; any remote
failure falls back to the local generator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import httpx
import structlog

from karbon.core.config import settings

logger = structlog.get_logger()


@dataclass(frozen=True)
class DetailLine:
    source_name: str
    unit: str
    category: str | None
    value: float
    emission_value: float


@dataclass(frozen=True)
class NarrativeContext:
    company_name: str
    sector: str | None
    total_emission: float
    details: list[DetailLine]


class NarrativeGenerator(Protocol):
    async def generate(self, context: NarrativeContext) -> str: ...


class NarrativeUnavailable(RuntimeError):
    """The remote generator could not produce usable text."""


# ── Remote ───────────────────────────────────────────────────────────────────


SYSTEM_PROMPT = (
    "Anda adalah analis lingkungan yang menyusun ringkasan analisis jejak karbon "
    "yang padat dan jelas. Fokus pada interpretasi data, sumber emisi terbesar, "
    "kemungkinan penyebab, dan area yang berlebihan. Tulis dalam Bahasa Indonesia yang alami."
)


def build_prompt(context: NarrativeContext) -> str:
    sector = f" (sektor {context.sector})" if context.sector else ""
    lines = [
        f"Tulis analisis singkat (maksimal 1-2 paragraf, jangan terpotong) tentang jejak karbon "
        f"{context.company_name}{sector}. Sertakan: total emisi, sumber emisi terbesar, indikasi "
        "area penggunaan yang berlebih, dan insight singkat lainnya. Hindari daftar bullet.",
        "",
        f"Total Emisi CO2: {context.total_emission:.2f} kg CO2e",
        "",
        "Rincian Sumber Emisi:",
    ]
    for index, detail in enumerate(context.details, start=1):
        category = f" [Kategori: {detail.category}]" if detail.category else ""
        lines.append(
            f"{index}. {detail.source_name}: {detail.value:g} {detail.unit} = "
            f"{detail.emission_value:.2f} kg CO2e{category}"
        )
    return "\n".join(lines)


class RemoteNarrativeGenerator:
    """Thin wrapper around the AI gateway completions endpoint."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._base_url = base_url or settings.AI_GATEWAY_URL
        self._api_key = api_key if api_key is not None else settings.AI_GATEWAY_API_KEY
        self._timeout = timeout or settings.AI_TIMEOUT_SECONDS

    async def generate(self, context: NarrativeContext) -> str:
        payload = {
            "task_type": "analysis",
            "system": SYSTEM_PROMPT,
            "prompt": build_prompt(context),
            "max_tokens": 300,
            "temperature": 0.5,
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    f"{self._base_url}/v1/completions",
                    json=payload,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
                resp.raise_for_status()
                content = (resp.json().get("content") or "").strip()
        except (httpx.HTTPError, ValueError) as exc:
            raise NarrativeUnavailable(str(exc)) from exc

        if not content:
            raise NarrativeUnavailable("AI gateway returned empty content")
        return content


# ── Local ────────────────────────────────────────────────────────────────────


class LocalNarrativeGenerator:
    """Rule-based narrative used when the AI gateway is unavailable."""

    async def generate(self, context: NarrativeContext) -> str:
        return basic_analysis(context)


def basic_analysis(context: NarrativeContext) -> str:
    total = context.total_emission
    if not context.details:
        return (
            f"Total emisi tercatat {total:.2f} kg CO2e. Data detail emisi tidak tersedia "
            "untuk analisis lebih lanjut."
        )

    ranked = sorted(context.details, key=lambda d: d.emission_value, reverse=True)
    top = ranked[0]
    second = ranked[1] if len(ranked) > 1 else None

    lead = f"{top.source_name} menyumbang tertinggi sekitar {top.emission_value:.2f} kg CO2e"
    if second is not None:
        lead += f", diikuti {second.source_name} sekitar {second.emission_value:.2f} kg CO2e"

    first_paragraph = (
        f"Total emisi tercatat {total:.2f} kg CO2e. {lead}. Pola ini menunjukkan konsentrasi "
        "emisi pada beberapa aktivitas inti dan perlu perhatian untuk menekan kontribusi terbesar."
    )
    second_paragraph = (
        f"Kemungkinan area berlebihan ada pada penggunaan {top.source_name} (nilai input "
        f"{top.value:g} {top.unit}). Periksa faktor operasional yang mendorong konsumsi, variasi "
        "beban harian, dan efisiensi peralatan untuk mengidentifikasi peluang pengurangan yang "
        "paling realistis."
    )
    return f"{first_paragraph} {second_paragraph}"


# ── Selection ────────────────────────────────────────────────────────────────


def get_narrative_generator() -> NarrativeGenerator:
    """Remote generator when the gateway is configured, local heuristic otherwise."""
    if settings.AI_NARRATIVE_ENABLED and settings.AI_GATEWAY_API_KEY:
        return RemoteNarrativeGenerator()
    return LocalNarrativeGenerator()


async def generate_narrative(
    context: NarrativeContext,
    generator: NarrativeGenerator,
    *,
    use_ai: bool = True,
) -> tuple[str, bool]:
    """Return (narrative, ai_used). Never raises for generator failures."""
    local = LocalNarrativeGenerator()
    if not use_ai or isinstance(generator, LocalNarrativeGenerator):
        return await local.generate(context), False

    try:
        return await generator.generate(context), True
    except Exception as exc:  # noqa: BLE001
        logger.warning(
            "narrative_ai_failed",
            company=context.company_name,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return await local.generate(context), False
