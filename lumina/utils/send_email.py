from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType


async def send_email(subject: str, email_to: str, body: str, conf: ConnectionConfig):
    message = MessageSchema(
        subject=subject,
        recipients=[email_to],
        body=body,
        subtype=MessageType.html
    )
    fm = FastMail(conf)
    await fm.send_message(message)
