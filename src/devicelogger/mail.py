from __future__ import annotations

"""
Log File Mail Artifact.

Builds an email message carrying the current log file as a plain-text
attachment, ready to hand to whatever mail transport or composer the host
application uses.
"""

from email.message import EmailMessage
from typing import Iterable, Optional

from devicelogger.domain.constants import LOG_FILE_EXTENSION
from devicelogger.service import DeviceLogger


def create_mail_message(
        device_logger: DeviceLogger,
        recipients: Iterable[str] = (),
        sender: Optional[str] = None,
        subject: str = "Device logs",
        body: str = "",
) -> Optional[EmailMessage]:
    """
    Create a message with the log file attached.

    Args:
        device_logger: Service whose log file is attached.
        recipients: 'To' addresses.
        sender: Optional 'From' address.
        subject: Subject line.
        body: Plain-text body.

    Returns:
        Optional[EmailMessage]: The message, or None if there is no log data.
    """
    data = device_logger.get_log_data()
    if data is None:
        return None

    msg = EmailMessage()
    msg["Subject"] = subject
    to = [r for r in recipients if r]
    if to:
        msg["To"] = ", ".join(to)
    if sender:
        msg["From"] = sender
    msg.set_content(body)

    msg.add_attachment(
        data,
        maintype="text",
        subtype="plain",
        filename=f"{device_logger.file_name}{LOG_FILE_EXTENSION}",
    )
    return msg
