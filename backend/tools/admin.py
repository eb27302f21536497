"""Registry operator CLI

Usage:
    python tools/admin.py stats                               Certificate counts by status
    python tools/admin.py users                               Officer accounts
    python tools/admin.py user-create <email> <password> <name> [--role admin|registration]
    python tools/admin.py certificates [--status active]      Recent certificates
    python tools/admin.py certificate LRMS-2024-123456        Certificate detail
    python tools/admin.py activate LRMS-2024-123456           pending -> active
    python tools/admin.py revoke LRMS-2024-123456             active -> revoked
    python tools/admin.py verify LRMS-2024-123456             Public verification result
    python tools/admin.py scan ./photo-of-qr.png              Verify from a QR image
    python tools/admin.py render LRMS-2024-123456 --format png --out cert.png
"""
import argparse
import asyncio
import os
import sys
from datetime import date
from pathlib import Path

# Resolve the relative DB path against backend/
BACKEND_DIR = Path(__file__).resolve().parent.parent
os.chdir(BACKEND_DIR)
sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import select, func

from config import settings
from domain.enums import CertificateStatus, UserRole
from domain.exceptions import DomainError
from application.use_cases.manage_certificate import ChangeStatusUseCase, ListCertificatesUseCase
from application.use_cases.render_certificate import RenderCertificateUseCase
from application.use_cases.verify_certificate import VerifyCertificateUseCase
from infrastructure.auth.password_service import hash_password
from infrastructure.codec.qr_codec import QrCodec
from infrastructure.persistence.database import get_db_session, init_db
from infrastructure.persistence.models.certificate import Certificate
from infrastructure.persistence.repositories.certificate_repository import SqlAlchemyCertificateRepository
from infrastructure.persistence.repositories.user_repository import SqlAlchemyUserRepository
from infrastructure.rendering.composer import CertificateComposer
from infrastructure.rendering.formatting import format_date, format_land_size


# ==================== helpers ====================

def fmt_date(dt) -> str:
    if not dt:
        return "-"
    return dt.strftime("%Y-%m-%d %H:%M")


def print_table(headers: list, rows: list, col_widths: list = None):
    """Plain text table"""
    if not col_widths:
        col_widths = [max(len(str(h)), max((len(str(r[i])) for r in rows), default=0)) + 2
                      for i, h in enumerate(headers)]

    header_line = "".join(str(h).ljust(w) for h, w in zip(headers, col_widths))
    print(header_line)
    print("-" * len(header_line))
    for row in rows:
        print("".join(str(c).ljust(w) for c, w in zip(row, col_widths)))


def fail(message: str):
    print(message)
    sys.exit(1)


# ==================== commands ====================

async def cmd_stats():
    """Certificate counts by stored status"""
    async with get_db_session() as s:
        result = await s.execute(select(Certificate.status, func.count(Certificate.id))
                                 .group_by(Certificate.status))
        counts = {row[0]: row[1] for row in result.all()}

    print("=== Certificates ===\n")
    for status in CertificateStatus:
        if status == CertificateStatus.EXPIRED:
            continue  # derived at read time, never stored
        print(f"  {status.value}: {counts.get(status, 0)}")
    print(f"  total: {sum(counts.values())}")


async def cmd_users():
    async with get_db_session() as s:
        users = await SqlAlchemyUserRepository(s).list()

    if not users:
        print("No users.")
        return
    rows = [[u.id, u.email, u.name, u.role, "active" if u.is_active else "disabled"] for u in users]
    print(f"{len(rows)} users:\n")
    print_table(["ID", "Email", "Name", "Role", "State"], rows)


async def cmd_user_create(email: str, password: str, name: str, role: str):
    async with get_db_session() as s:
        try:
            user = await SqlAlchemyUserRepository(s).create(
                email=email, password_hash=hash_password(password), name=name, role=role)
        except DomainError as e:
            fail(str(e))
    print(f"Created {user.role} account {user.email} (id {user.id})")


async def cmd_certificates(status: str = None):
    async with get_db_session() as s:
        page = await ListCertificatesUseCase(SqlAlchemyCertificateRepository(s)).execute(
            page=1, page_size=50, status=CertificateStatus(status) if status else None)

    if not page.items:
        print("No certificates.")
        return
    today = date.today()
    rows = [[r.certificate_number, r.parcel_id, r.owner.display_name[:24],
             r.effective_status(today).value, r.issuance.issued_date.isoformat(), fmt_date(r.created_at)]
            for r in page.items]
    print(f"{len(rows)} of {page.total} certificates:\n")
    print_table(["Number", "Parcel", "Owner", "Status", "Issued", "Created"], rows)


async def cmd_certificate(number: str):
    async with get_db_session() as s:
        try:
            record = await SqlAlchemyCertificateRepository(s).get_by_number(number)
        except DomainError as e:
            fail(str(e))

    land = record.land
    location = land.location
    print(f"=== {record.certificate_number} ===\n")
    print(f"  Registration no.: {record.registration_number}")
    print(f"  Parcel:           {record.parcel_id}")
    print(f"  Status:           {record.status.value} (effective: {record.effective_status(date.today()).value})")
    print(f"  Owner:            {record.owner.display_name} / {record.owner.local_display_name or '-'}")
    print(f"  National ID:      {record.owner.national_id}")
    print(f"  Location:         {location.region.primary}, {location.zone.primary}, "
          f"{location.woreda.primary}, {location.kebele.primary}")
    print(f"  Land:             {format_land_size(land.size, land.size_unit)}, {land.land_use.value}")
    print(f"  Issued:           {format_date(record.issuance.issued_date)}")
    print(f"  Valid until:      {format_date(record.issuance.expiration_date)}")
    print(f"  Artifact SHA-256: {record.artifact_sha256 or '-'}")
    print("\n[Assets]")
    for slot, outcome in sorted(record.asset_outcomes.items(), key=lambda item: item[0].value):
        print(f"  {slot.value}: {outcome}")


async def cmd_transition(number: str, target: CertificateStatus):
    async with get_db_session() as s:
        try:
            record = await ChangeStatusUseCase(SqlAlchemyCertificateRepository(s)).execute(number, target)
        except DomainError as e:
            fail(str(e))
    print(f"{record.certificate_number}: {record.status.value}")


async def cmd_verify(query: str = None, image_path: str = None):
    async with get_db_session() as s:
        use_case = VerifyCertificateUseCase(SqlAlchemyCertificateRepository(s), QrCodec())
        try:
            if image_path:
                result = await use_case.execute_scan(Path(image_path).read_bytes())
            else:
                result = await use_case.execute(query)
        except DomainError as e:
            fail(str(e))

    print(f"found:  {result.found}")
    print(f"status: {result.status.value}")
    if result.record:
        view = result.record
        print(f"owner:  {view.owner_name}")
        print(f"id:     {view.national_id_masked}")
        print(f"land:   {view.region} / {view.woreda} / {view.kebele}, "
              f"{format_land_size(view.land_size, view.size_unit)}")
        print(f"issued: {format_date(view.issued_date)}; valid until {format_date(view.expiration_date)}")


async def cmd_render(number: str, fmt: str, out: str = None):
    async with get_db_session() as s:
        use_case = RenderCertificateUseCase(SqlAlchemyCertificateRepository(s), QrCodec(),
                                            CertificateComposer(), raster_dpi=settings.RASTER_DPI)
        try:
            rendered = await use_case.execute(number, fmt)
        except DomainError as e:
            fail(str(e))

    path = Path(out or rendered.filename)
    path.write_bytes(rendered.content)
    print(f"Wrote {path} ({len(rendered.content):,} bytes, pdf sha256 {rendered.sha256})")


async def with_db(command):
    """Create missing tables, then run the command on the same event loop"""
    await init_db()
    return await command


# ==================== main ====================

def main():
    parser = argparse.ArgumentParser(
        description="Land registration certificate operator CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
commands:
  stats                                          certificate counts by status
  users                                          officer accounts
  user-create <email> <password> <name> [--role] create an account
  certificates [--status S]                      recent certificates
  certificate <number>                           certificate detail
  activate <number>                              pending -> active
  revoke <number>                                active -> revoked (terminal)
  verify <number-or-payload>                     public verification result
  scan <image>                                   verify from a QR image
  render <number> [--format pdf|png] [--out P]   write the certificate artifact
        """,
    )
    parser.add_argument("command", help="command")
    parser.add_argument("args", nargs="*", help="command arguments")
    parser.add_argument("--status", choices=[s.value for s in CertificateStatus if s != CertificateStatus.EXPIRED])
    parser.add_argument("--role", choices=[r.value for r in UserRole], default=UserRole.REGISTRATION.value)
    parser.add_argument("--format", choices=["pdf", "png"], default="pdf")
    parser.add_argument("--out", help="output path (render)")

    args = parser.parse_args()
    cmd = args.command

    def need(count: int, usage: str):
        if len(args.args) < count:
            parser.error(f"usage: admin.py {usage}")

    if cmd == "stats":
        asyncio.run(with_db(cmd_stats()))

    elif cmd == "users":
        asyncio.run(with_db(cmd_users()))

    elif cmd == "user-create":
        need(3, "user-create <email> <password> <name> [--role admin|registration]")
        asyncio.run(with_db(cmd_user_create(args.args[0], args.args[1], " ".join(args.args[2:]), args.role)))

    elif cmd == "certificates":
        asyncio.run(with_db(cmd_certificates(args.status)))

    elif cmd == "certificate":
        need(1, "certificate <number>")
        asyncio.run(with_db(cmd_certificate(args.args[0])))

    elif cmd == "activate":
        need(1, "activate <number>")
        asyncio.run(with_db(cmd_transition(args.args[0], CertificateStatus.ACTIVE)))

    elif cmd == "revoke":
        need(1, "revoke <number>")
        asyncio.run(with_db(cmd_transition(args.args[0], CertificateStatus.REVOKED)))

    elif cmd == "verify":
        need(1, "verify <number>")
        asyncio.run(with_db(cmd_verify(query=args.args[0])))

    elif cmd == "scan":
        need(1, "scan <image>")
        asyncio.run(with_db(cmd_verify(image_path=args.args[0])))

    elif cmd == "render":
        need(1, "render <number> [--format pdf|png] [--out path]")
        asyncio.run(with_db(cmd_render(args.args[0], args.format, args.out)))

    else:
        parser.error(f"unknown command: {cmd}")


if __name__ == "__main__":
    main()
