from .smtp_mail_sender import LoggingMailSender, SmtpMailSender

__all__ = ["LoggingMailSender", "SmtpMailSender"]
