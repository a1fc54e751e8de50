from typing import Optional, Tuple
from datetime import datetime
import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
import os
import dotenv

from helpers.reconciliation import DeliveryError
from helpers.time_window import as_utc, display_timezone


dotenv.load_dotenv()

logger = logging.getLogger(__name__)

REMINDER_SUBJECT = "⏰ Your quiet hour is starting soon"


def format_local_time(value: datetime, tz=None) -> str:
    local = as_utc(value).astimezone(tz or display_timezone())
    return local.strftime("%d/%m/%Y, %I:%M:%S %p").lower()


def format_quiet_hour_reminder(start_time: datetime, end_time: datetime, tz=None) -> Tuple[str, str, str]:
    start_local = format_local_time(start_time, tz)
    end_local = format_local_time(end_time, tz)

    text = f"Your silent study block starts at {start_local} and ends at {end_local}."
    message_html = f"""\
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>Quiet Hour Reminder</title>
        <style>
            body {{
                margin: 0;
                padding: 0;
                background-color: #f4f4f4;
                font-family: Arial, sans-serif;
            }}
            .email-container {{
                max-width: 600px;
                margin: 0 auto;
                background-color: #ffffff;
                border-radius: 8px;
                overflow: hidden;
                box-shadow: 0 4px 6px rgba(0, 0, 0, 0.1);
            }}
            .body {{
                padding: 30px;
                color: #333333;
            }}
            .body h1 {{
                color: #2752D8;
                margin-bottom: 20px;
                font-size: 24px;
            }}
            .time-box {{
                background-color: #f0f4ff;
                border-left: 4px solid #2752D8;
                padding: 15px;
                margin: 20px 0;
                font-size: 16px;
                color: #152B72;
                border-radius: 4px;
            }}
            .footer {{
                background-color: #f4f4f4;
                padding: 20px;
                text-align: center;
                font-size: 14px;
                color: #777777;
            }}
        </style>
    </head>
    <body>
        <div class="email-container">
            <div class="body">
                <h1>Your quiet hour is starting soon</h1>
                <p>Time to wrap up and get ready for your silent study block.</p>
                <div class="time-box">
                    <strong>Starts:</strong> {start_local}<br>
                    <strong>Ends:</strong> {end_local}
                </div>
            </div>
            <div class="footer">
                <p>Quiet Hours Scheduler</p>
            </div>
        </div>
    </body>
    </html>
    """
    return REMINDER_SUBJECT, text, message_html


def send_email(to_address: str, subject: str, text: str, message_html: Optional[str] = None):
    user = os.getenv("SMTP_FROM_USER") or "Quiet Hours"
    smtp_server = os.getenv("SMTP_SERVER")
    smtp_port_str = os.getenv("SMTP_PORT") or "587"
    from_address = os.getenv("SMTP_FROM_ADDRESS")
    password = os.getenv('SMTP_PASSWORD')

    if not all([smtp_server, from_address, password]):
        raise DeliveryError("SMTP configuration is not set properly in environment variables.")

    try:
        smtp_port = int(smtp_port_str)
    except ValueError as e:
        raise DeliveryError(f"Invalid SMTP_PORT: {smtp_port_str!r}") from e
    message = MIMEMultipart("alternative")
    message["From"] = f'"{user}" <{from_address}>'
    message["To"] = to_address
    message["Subject"] = subject
    message.attach(MIMEText(text, "plain"))
    if message_html:
        message.attach(MIMEText(message_html, "html"))

    try:
        if smtp_port == 465:
            with smtplib.SMTP_SSL(smtp_server, smtp_port) as server:
                server.login(from_address, password)
                server.send_message(message)
        else:
            with smtplib.SMTP(smtp_server, smtp_port) as server:
                server.starttls()
                server.login(from_address, password)
                server.send_message(message)
    except (smtplib.SMTPException, OSError) as e:
        raise DeliveryError(f"Failed to send email to {to_address}: {e}") from e
    return True


def send_quiet_hour_reminder(to_email: str, start_time: datetime, end_time: datetime, tz=None):
    subject, text, message_html = format_quiet_hour_reminder(start_time, end_time, tz)
    return send_email(to_email, subject, text, message_html)


class Mailer:
    """Async face of the SMTP sender; the blocking send runs in a worker thread."""

    def __init__(self, tz=None):
        self.tz = tz

    async def send_reminder(self, to_email: str, start_time: datetime, end_time: datetime):
        logger.info("Sending quiet hour reminder to %s", to_email)
        return await asyncio.to_thread(send_quiet_hour_reminder, to_email, start_time, end_time, self.tz)
