import csv
import io
from typing import Dict, Iterable, List, Optional

from openpyxl import Workbook

from models import RegistrationStatus
from registration_state import parse_status

EXPORT_HEADERS = [
    "Registration ID",
    "Name",
    "Email",
    "Phone",
    "Institution",
    "Level",
    "Class",
    "ID at Institution",
    "Competition",
    "Status",
    "Transaction ID",
    "Payment Provider",
    "Registered At",
]

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _matches_search(participant, needle: str) -> bool:
    fields = (participant.name, participant.email, participant.institution, participant.id_at_institution)
    return any(needle in str(value or "").lower() for value in fields)


def filter_participant_groups(
    groups: Iterable[Dict],
    search: Optional[str] = None,
    competition_id: Optional[str] = None,
    status: Optional[str] = None,
) -> List[Dict]:
    """Narrow grouped participants; a participant matches a status if any registration has it."""
    needle = (search or "").strip().lower()
    wanted_status = parse_status(status) if status else None
    filtered = []
    for group in groups:
        registrations = group["registrations"]
        if needle and not _matches_search(group["participant"], needle):
            continue
        if competition_id and not any(r.competition_id == competition_id for r in registrations):
            continue
        if wanted_status and not any(r.status == wanted_status for r in registrations):
            continue
        filtered.append(group)
    return filtered


def summarize_participants(groups: Iterable[Dict]) -> Dict[str, int]:
    stats = {"total_participants": 0, "confirmed": 0, "pending": 0, "rejected": 0, "total_registrations": 0}
    for group in groups:
        statuses = {r.status for r in group["registrations"]}
        stats["total_participants"] += 1
        stats["total_registrations"] += len(group["registrations"])
        if RegistrationStatus.CONFIRMED in statuses:
            stats["confirmed"] += 1
        elif RegistrationStatus.PENDING in statuses:
            stats["pending"] += 1
        elif statuses == {RegistrationStatus.REJECTED}:
            stats["rejected"] += 1
    return stats


def export_rows(registrations: Iterable) -> List[List]:
    rows = []
    for registration in registrations:
        participant = registration.participant
        competition = registration.competition
        rows.append([
            registration.id,
            participant.name,
            participant.email or "",
            participant.phone or "",
            participant.institution,
            participant.level or "",
            participant.class_level if participant.class_level is not None else "",
            participant.id_at_institution,
            competition.title if competition else "",
            registration.status.value,
            registration.transaction_id or "",
            registration.payment_provider or "",
            registration.created_at.isoformat() if registration.created_at else "",
        ])
    return rows


def render_csv(rows: List[List]) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_HEADERS)
    for row in rows:
        writer.writerow(row)
    return output.getvalue()


def render_xlsx(rows: List[List]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Registrations"
    ws.append(EXPORT_HEADERS)
    for row in rows:
        ws.append(row)
    stream = io.BytesIO()
    wb.save(stream)
    return stream.getvalue()
