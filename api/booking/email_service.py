import logging

import sib_api_v3_sdk
from django.conf import settings
from django.utils.html import escape
from sib_api_v3_sdk.rest import ApiException

logger = logging.getLogger(__name__)


class Email:

    def format_date(self, value):
        """23 July 2025, without any timezone shifting."""
        if not value:
            return "N/A"
        return f"{value.day} {value.strftime('%B %Y')}"

    def format_money(self, amount):
        return f"{amount:,.2f} {settings.CURRENCY}"

    def __init__(self):
        self.configuration = sib_api_v3_sdk.Configuration()
        self.configuration.api_key['api-key'] = settings.BREVO_API_KEY

    def _send_email_via_brevo(self, subject, html_content, recipient_list, sender_name=None, sender_email=None):
        """
        Internal method to send email using Brevo API
        """
        recipient_list = [email for email in recipient_list if email]
        if not recipient_list:
            return None
        if not settings.BREVO_API_KEY:
            logger.info("BREVO_API_KEY not set, skipping e-mail %r to %s", subject, recipient_list)
            return None

        api_instance = sib_api_v3_sdk.TransactionalEmailsApi(
            sib_api_v3_sdk.ApiClient(self.configuration)
        )

        sender = {
            "name": sender_name or settings.DEFAULT_FROM_NAME,
            "email": sender_email or settings.DEFAULT_FROM_EMAIL,
        }
        to = [{"email": email} for email in recipient_list]

        send_smtp_email = sib_api_v3_sdk.SendSmtpEmail(
            sender=sender,
            to=to,
            html_content=html_content,
            subject=subject
        )

        try:
            return api_instance.send_transac_email(send_smtp_email)
        except ApiException as e:
            logger.error("Brevo rejected e-mail %r to %s: %s", subject, recipient_list, e)
            return None
        except Exception:
            # Runs after commit; the booking or withdrawal is already saved.
            logger.exception("Could not reach Brevo for e-mail %r to %s", subject, recipient_list)
            return None

    def _booking_table(self, booking):
        vehicle = booking.vehicle
        rows = [
            ("Booking Reference", f"#{booking.pk}"),
            ("Vehicle", escape(f"{vehicle.brand} {vehicle.model} ({vehicle.license_plate})")),
            ("Rental Company", escape(vehicle.business.name)),
            ("Pickup", f"{self.format_date(booking.pickup_date)} at {booking.pickup_time:%H:%M}"),
            ("Return", f"{self.format_date(booking.return_date)} at {booking.return_time:%H:%M}"),
            ("Rental Days", booking.rental_days),
            ("Subtotal", self.format_money(booking.subtotal)),
            ("Deposit", self.format_money(booking.deposit_amount)),
        ]
        if booking.total_km_allowed is not None:
            rows.append(("Mileage Allowance", f"{booking.total_km_allowed} km"))
        body = "".join(
            f"<tr><td><strong>{label}:</strong></td><td>{value}</td></tr>" for label, value in rows
        )
        return f'<table style="border-collapse: collapse; width: 100%;">{body}</table>'

    def send_booking_received_email(self, booking):
        """Tell the customer the request reached the rental company."""
        subject = f"Booking Request Received – Reference #{booking.pk}"
        html_content = f"""
        <html>
            <body>
                <p>Dear {escape(booking.customer_name)},</p>
                <p>Your booking request has been sent to <strong>{escape(booking.vehicle.business.name)}</strong>.
                You will receive another e-mail once it is confirmed.</p>
                {self._booking_table(booking)}
                <p>Best regards,<br><strong>{settings.DEFAULT_FROM_NAME}</strong></p>
            </body>
        </html>
        """
        return self._send_email_via_brevo(subject, html_content.strip(), [booking.customer_email])

    def send_booking_confirmed_email(self, booking):
        subject = f"Booking Confirmed – Reference #{booking.pk}"
        business = booking.vehicle.business
        html_content = f"""
        <html>
            <body>
                <p>Dear {escape(booking.customer_name)},</p>
                <p>Good news: <strong>{escape(business.name)}</strong> has confirmed your booking.</p>
                {self._booking_table(booking)}
                <p>Please bring your driver's license ({escape(booking.driver_license_number)}) at pickup.</p>
                <p>Phone: {escape(business.phone)}<br>E-mail: {escape(business.email)}</p>
            </body>
        </html>
        """
        return self._send_email_via_brevo(subject, html_content.strip(), [booking.customer_email])

    def send_booking_cancellation_email(self, booking):
        subject = f"Booking Cancelled – Reference #{booking.pk}"
        reason = booking.cancellation_reason or "No reason was given."
        html_content = f"""
        <html>
            <body>
                <p>Dear {escape(booking.customer_name)},</p>
                <p>Your booking has been <strong>cancelled</strong>. {escape(reason)}</p>
                {self._booking_table(booking)}
                <p>Best regards,<br><strong>{escape(booking.vehicle.business.name)}</strong></p>
            </body>
        </html>
        """
        return self._send_email_via_brevo(subject, html_content.strip(), [booking.customer_email])

    def send_withdrawal_requested_email(self, withdrawal):
        business = withdrawal.business
        subject = f"Withdrawal Request #{withdrawal.pk} Received"
        html_content = f"""
        <html>
            <body>
                <p>Dear {escape(business.name)},</p>
                <p>We received your request to withdraw <strong>{self.format_money(withdrawal.amount)}</strong>
                to {escape(withdrawal.bank_name)} ({escape(withdrawal.account_holder_name)}).</p>
                <p>The amount has been reserved from your available balance while the request is reviewed.</p>
            </body>
        </html>
        """
        return self._send_email_via_brevo(
            subject, html_content.strip(), [business.email, settings.ADMIN_EMAIL]
        )

    def send_withdrawal_processed_email(self, withdrawal):
        business = withdrawal.business
        status = withdrawal.get_status_display().lower()
        subject = f"Withdrawal Request #{withdrawal.pk} {withdrawal.get_status_display()}"
        notes = f"<p>Notes: {escape(withdrawal.admin_notes)}</p>" if withdrawal.admin_notes else ""
        html_content = f"""
        <html>
            <body>
                <p>Dear {escape(business.name)},</p>
                <p>Your withdrawal of <strong>{self.format_money(withdrawal.amount)}</strong> has been {status}.</p>
                {notes}
            </body>
        </html>
        """
        return self._send_email_via_brevo(subject, html_content.strip(), [business.email])
