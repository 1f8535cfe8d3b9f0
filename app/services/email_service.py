"""
AWS SES Email Service for interview confirmation and cancellation emails.

Handles email formatting and AWS SES integration. Sending is a post-commit
side effect of interview scheduling; it is skipped unless EMAIL_ENABLED is set.
"""

import logging
from typing import List, Optional
import boto3
from botocore.exceptions import ClientError, BotoCoreError
from sqlalchemy.orm import Session
from app.core.config import settings
from app.services.hooks import InterviewEvent
from app.utils.time import as_utc

logger = logging.getLogger(__name__)

MODE_LABELS = {
    "google_meet": "Google Meet",
    "microsoft_teams": "Microsoft Teams",
    "in_person": "In person",
    "custom_url": "Video call",
    "phone": "Phone",
}


class EmailService:
    """
    Service for sending emails via AWS SES.

    Supports both development (sandbox) and production modes.
    """

    def __init__(self):
        """Initialize AWS SES client"""
        session_kwargs = {
            'region_name': settings.AWS_REGION,
        }

        # Add credentials if provided (otherwise uses IAM role)
        if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
            session_kwargs['aws_access_key_id'] = settings.AWS_ACCESS_KEY_ID
            session_kwargs['aws_secret_access_key'] = settings.AWS_SECRET_ACCESS_KEY

        self.ses_client = boto3.client('ses', **session_kwargs)

    def send_email(self, to_emails: List[str], subject: str, text_body: str) -> bool:
        """
        Send a plain text email.

        Returns:
            bool: True if email sent successfully, False otherwise
        """
        try:
            response = self.ses_client.send_email(
                Source=f"{settings.AWS_SES_FROM_NAME} <{settings.AWS_SES_FROM_EMAIL}>",
                Destination={'ToAddresses': to_emails},
                Message={
                    'Subject': {'Data': subject, 'Charset': 'UTF-8'},
                    'Body': {
                        'Text': {'Data': text_body, 'Charset': 'UTF-8'}
                    }
                }
            )

            message_id = response.get('MessageId')
            logger.info(f"Email '{subject}' sent to {len(to_emails)} recipients (MessageId: {message_id})")
            return True

        except ClientError as e:
            error_code = e.response['Error']['Code']
            error_message = e.response['Error']['Message']
            logger.error(f"AWS SES ClientError: {error_code} - {error_message}")

            if error_code == 'MessageRejected':
                logger.error(f"Email rejected: {error_message}")
            elif error_code == 'MailFromDomainNotVerified':
                logger.error("Sender email not verified in SES")

            return False

        except BotoCoreError as e:
            logger.error(f"AWS BotoCoreError: {str(e)}")
            return False

    def send_interview_email(self, event: InterviewEvent) -> bool:
        """
        Send the confirmation (or cancellation) to the candidate and panel.
        """
        recipients = [email for email in [event.candidate_email, *event.panel_emails] if email]
        if not recipients:
            logger.info(f"No email recipients for interview {event.interview_id}")
            return False

        if event.cancelled:
            subject = f"Interview Cancelled - {event.job_title}"
        else:
            subject = f"Interview Scheduled - {event.job_title}"

        return self.send_email(recipients, subject, self._build_interview_text(event))

    def _build_interview_text(self, event: InterviewEvent) -> str:
        """
        Build plain text email body for an interview event.
        """
        when = as_utc(event.scheduled_at).strftime("%A, %d %B %Y at %H:%M UTC")
        mode = MODE_LABELS.get(event.mode, event.mode)

        if event.cancelled:
            text = f"""Hi {event.candidate_name},

Your interview for {event.job_title} scheduled for {when} has been cancelled.
"""
            if event.reason:
                text += f"\nReason: {event.reason}\n"
            return text + "\nWe will be in touch about next steps.\n"

        text = f"""Hi {event.candidate_name},

Your interview for {event.job_title} is confirmed.

When: {when} ({event.timezone})
Duration: {event.duration} minutes
Format: {mode}
"""
        if event.location:
            text += f"Where: {event.location}\n"
        return text + "\nWe look forward to speaking with you.\n"


def send_interview_emails(db: Session, event: InterviewEvent) -> Optional[bool]:
    """Post-commit hook for interview scheduling and cancellation."""
    if not settings.EMAIL_ENABLED:
        logger.debug(f"Email disabled; skipping interview email for {event.interview_id}")
        return None
    return email_service.send_interview_email(event)


# Singleton instance
email_service = EmailService()
