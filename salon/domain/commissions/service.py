"""
Commission service - settlement reporting over completed bookings

Pure reads: each done booking contributes its payment amount and its persisted
commission amount; nothing is recomputed.
"""

import csv
import logging
from datetime import datetime
from decimal import Decimal
from io import StringIO
from typing import Optional

from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from ...shared.timezone import day_range, to_salon
from ...shared.validators import validate_email
from .repository import CommissionRepository

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


class CommissionService:
    """Service layer for commission and payment reports"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CommissionRepository()

    def commission_report(
        self,
        from_key: Optional[str] = None,
        to_key: Optional[str] = None,
        collaborator_email: Optional[str] = None,
    ) -> dict:
        """
        One row per done booking whose start time falls within [from, to] (salon days).

        The latest payment and commission of each booking are reported; totals are the
        exact sums of the row amounts.
        """
        start, end = day_range(from_key, to_key)
        collaborator = validate_email(collaborator_email) if collaborator_email else None

        rows = []
        collaborators = set()
        total_amount = ZERO
        total_commission = ZERO

        for booking in self.repo.list_done_bookings(self.db, start, end):
            if not booking.payments or not booking.commissions:
                logger.warning(f"⚠️ Done booking {booking.id} has no settlement rows, skipped in report")
                continue

            payment = booking.payments[-1]
            commission = booking.commissions[-1]
            if commission.assignee_email:
                collaborators.add(commission.assignee_email)
            if collaborator and commission.assignee_email != collaborator:
                continue

            total_amount += payment.amount
            total_commission += commission.amount
            rows.append(
                {
                    "bookingId": booking.id,
                    "clientName": booking.client_name,
                    "serviceName": booking.service.name if booking.service else None,
                    "startTime": booking.start_time,
                    "amount": payment.amount,
                    "paymentMethod": payment.method,
                    "commissionPercentage": commission.percentage,
                    "commissionAmount": commission.amount,
                    "assigneeEmail": commission.assignee_email,
                }
            )

        logger.info(
            f"📊 Commission report {from_key or '…'} → {to_key or '…'}: {len(rows)} bookings, "
            f"total {total_amount}, commission {total_commission}"
        )
        return {
            "from_date": from_key,
            "to_date": to_key,
            "rows": rows,
            "totalAmount": total_amount,
            "totalCommission": total_commission,
            "collaborators": sorted(collaborators),
        }

    def export_commissions_csv(
        self,
        from_key: Optional[str] = None,
        to_key: Optional[str] = None,
        collaborator_email: Optional[str] = None,
    ) -> StreamingResponse:
        """Export the commission report as CSV"""
        report = self.commission_report(from_key, to_key, collaborator_email)

        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(
            [
                "Booking ID",
                "Client",
                "Service",
                "Start (salon time)",
                "Amount",
                "Payment Method",
                "Commission %",
                "Commission",
                "Collaborator",
            ]
        )
        for row in report["rows"]:
            writer.writerow(
                [
                    row["bookingId"],
                    row["clientName"],
                    row["serviceName"] or "",
                    to_salon(row["startTime"]).strftime("%Y-%m-%d %H:%M"),
                    f"{row['amount']:.2f}",
                    row["paymentMethod"],
                    f"{row['commissionPercentage']:.2f}",
                    f"{row['commissionAmount']:.2f}",
                    row["assigneeEmail"] or "",
                ]
            )
        writer.writerow(
            ["", "", "", "Total", f"{report['totalAmount']:.2f}", "", "", f"{report['totalCommission']:.2f}", ""]
        )

        output.seek(0)
        filename = f"commissions_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
        logger.info(f"✅ CSV export successful: {filename} ({len(report['rows'])} bookings)")

        return StreamingResponse(
            iter([output.getvalue()]),
            media_type="text/csv",
            headers={
                "Content-Disposition": f"attachment; filename={filename}",
                "Cache-Control": "no-cache",
            },
        )

    def list_payments(self, from_key: Optional[str] = None, to_key: Optional[str] = None) -> dict:
        """Payments recorded within [from, to] salon days"""
        start, end = day_range(from_key, to_key)
        payments = self.repo.list_payments(self.db, start, end)
        items = [
            {
                "id": payment.id,
                "booking_id": payment.booking_id,
                "clientName": payment.booking.client_name if payment.booking else None,
                "amount": payment.amount,
                "method": payment.method,
                "created_at": payment.created_at,
            }
            for payment in payments
        ]
        total = sum((payment.amount for payment in payments), ZERO)
        return {"payments": items, "totalAmount": total}
