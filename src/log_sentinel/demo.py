"""Synthetic activity logs and forensic artifacts for demonstrations."""

from __future__ import annotations

import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from .models import (
    ArtifactType,
    Category,
    Dataset,
    ForensicArtifact,
    LogEvent,
    RiskLevel,
)

DEMO_DAYS = 7

_APPS: tuple[tuple[str, Category], ...] = (
    ("VS Code", Category.DEVELOPMENT),
    ("Google Chrome", Category.UNCATEGORIZED),
    ("Slack", Category.COMMUNICATION),
    ("Spotify", Category.ENTERTAINMENT),
    ("Zoom", Category.COMMUNICATION),
    ("Figma", Category.PRODUCTIVITY),
    ("Terminal", Category.DEVELOPMENT),
    ("System Settings", Category.SYSTEM),
    ("Discord", Category.COMMUNICATION),
    ("Steam", Category.ENTERTAINMENT),
)

_USB_DEVICES = (
    ("Samsung T7 Shield", "S5T7NS0R123456", RiskLevel.LOW),
    ("Sandisk Cruzer Blade", "4C530001290812111023", RiskLevel.MEDIUM),
    ("Unknown Mass Storage", "Generic-123901", RiskLevel.HIGH),
)

_RECENT_DOCS = (
    ("Q4_Financial_Report.xlsx", r"C:\Users\Admin\Documents\Finance", RiskLevel.MEDIUM),
    ("Project_Alpha_Secrets.docx", r"C:\Users\Admin\Desktop\Private", RiskLevel.HIGH),
    ("Resume_2025.pdf", r"C:\Users\Admin\Downloads", RiskLevel.LOW),
    ("passwords.txt", r"D:\Backups", RiskLevel.HIGH),
    ("Meeting_Notes.txt", r"C:\Users\Admin\Desktop", RiskLevel.LOW),
)

_SHELLBAGS = (
    ("My Pictures", r"C:\Users\Admin\Pictures", RiskLevel.LOW),
    ("Hidden_Project", r"E:\Hidden_Project", RiskLevel.HIGH),
    ("System32", r"C:\Windows\System32", RiskLevel.MEDIUM),
    ("Downloads", r"C:\Users\Admin\Downloads", RiskLevel.LOW),
)


def generate_demo_events(
    now: Optional[datetime] = None, rng: Optional[random.Random] = None
) -> list[LogEvent]:
    """Seven days of workday activity, newest first."""
    now = now or datetime.now(timezone.utc)
    rng = rng or random.Random()
    events: list[LogEvent] = []

    for day_offset in range(DEMO_DAYS):
        current = (now - timedelta(days=day_offset)).replace(
            hour=9, minute=0, second=0, microsecond=0
        )
        for _ in range(rng.randint(20, 39)):
            application, category = rng.choice(_APPS)
            duration = rng.randint(60, 1859)
            current += timedelta(seconds=duration + rng.random() * 60)
            title, category = _window_title(application, category, rng)
            events.append(
                LogEvent(
                    id=_demo_id(rng),
                    timestamp=_iso(current),
                    application=application,
                    window_title=title,
                    duration_seconds=duration,
                    category=category,
                )
            )

    return _newest_first(events)


def generate_demo_artifacts(
    now: Optional[datetime] = None, rng: Optional[random.Random] = None
) -> list[ForensicArtifact]:
    """USB, recent-document and shellbag records with fixed risk levels, newest first."""
    now = now or datetime.now(timezone.utc)
    rng = rng or random.Random()
    artifacts: list[ForensicArtifact] = []

    for name, serial, risk in _USB_DEVICES:
        vendor = name.split(" ")[0]
        artifacts.append(
            ForensicArtifact(
                id=_demo_id(rng),
                timestamp=_iso(now - timedelta(days=rng.random() * 30)),
                type=ArtifactType.USB_DEVICE,
                name=name,
                path=f"USBSTOR\\Disk&Ven_{vendor}&Prod_Storage\\{serial}",
                action="Device Connected",
                risk_level=risk,
            )
        )
    for name, path, risk in _RECENT_DOCS:
        artifacts.append(
            ForensicArtifact(
                id=_demo_id(rng),
                timestamp=_iso(now - timedelta(days=rng.random() * 7)),
                type=ArtifactType.RECENT_DOC,
                name=name,
                path=path,
                action="File Accessed (LNK)",
                risk_level=risk,
            )
        )
    for name, path, risk in _SHELLBAGS:
        artifacts.append(
            ForensicArtifact(
                id=_demo_id(rng),
                timestamp=_iso(now - timedelta(days=rng.random() * 60)),
                type=ArtifactType.SHELLBAG,
                name=name,
                path=path,
                action="Folder Explored",
                risk_level=risk,
            )
        )

    return _newest_first(artifacts)


def demo_dataset(
    *, forensics: bool = False, now: Optional[datetime] = None, seed: Optional[int] = None
) -> Dataset:
    rng = random.Random(seed)
    events = generate_demo_events(now, rng)
    artifacts = generate_demo_artifacts(now, rng) if forensics else []
    return Dataset(events=tuple(events), artifacts=tuple(artifacts))


def _window_title(
    application: str, category: Category, rng: random.Random
) -> tuple[str, Category]:
    if application == "Google Chrome":
        roll = rng.random()
        if roll > 0.7:
            return "Netflix - Watch TV Shows Online", Category.ENTERTAINMENT
        if roll > 0.4:
            return "GitHub - Pull Request #402", Category.DEVELOPMENT
        return "Google Search - React Hooks", Category.PRODUCTIVITY
    if application == "VS Code":
        return "index.tsx - Project Alpha", category
    return f"Main Window - {application}", category


def _iso(value: datetime) -> str:
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _newest_first(records: list) -> list:
    return sorted(records, key=lambda record: record.timestamp, reverse=True)


def _demo_id(rng: random.Random) -> str:
    return uuid.UUID(int=rng.getrandbits(128)).hex[:12]
