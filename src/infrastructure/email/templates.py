"""Invitation email templates."""

from html import escape

from infrastructure.email.provider import InvitationEmail


def invitation_subject(email: InvitationEmail) -> str:
    return f"You're invited to join OnlyIfYouKnow as a {email.invitation_type}!"


def invitation_html(email: InvitationEmail) -> str:
    message_block = ""
    if email.personal_message:
        message_block = (
            '<div style="background-color: #fff3cd; padding: 15px; '
            'border-left: 4px solid #ffc107; margin: 20px 0;">'
            f"<strong>Personal message:</strong><br>&quot;{escape(email.personal_message)}&quot;"
            "</div>"
        )

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Welcome to OnlyIfYouKnow</title>
</head>
<body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <div style="background-color: #FF5A5F; color: white; padding: 30px; text-align: center;">
    <h1>Welcome to OnlyIfYouKnow</h1>
  </div>
  <div style="padding: 30px;">
    <h2>Hi {escape(email.recipient_name)},</h2>
    <p>You've been invited by <strong>{escape(email.inviter_name)}</strong> to join
    OnlyIfYouKnow as a <strong>{escape(email.invitation_type)}</strong>.</p>
    {message_block}
    <div style="text-align: center; margin: 40px 0;">
      <a href="{escape(email.accept_url)}" style="display: inline-block; background-color: #28a745;
         color: white; padding: 15px 30px; text-decoration: none; border-radius: 8px;
         font-weight: bold;">Accept Invitation</a>
      <a href="{escape(email.decline_url)}" style="display: inline-block; background-color: #dc3545;
         color: white; padding: 15px 30px; text-decoration: none; border-radius: 8px;
         font-weight: bold;">Decline Invitation</a>
    </div>
    <p>This invitation expires in {email.expiry_days} days.</p>
    <p>Best regards,<br><strong>The OnlyIfYouKnow Team</strong></p>
  </div>
  <div style="padding: 20px; text-align: center; font-size: 12px; color: #666;">
    <p>This invitation was sent to {escape(email.recipient_email)}</p>
    <p>If you didn't expect this invitation, you can safely ignore this email.</p>
  </div>
</body>
</html>"""


def invitation_text(email: InvitationEmail) -> str:
    lines = [
        f"Hi {email.recipient_name},",
        "",
        f"You've been invited by {email.inviter_name} to join OnlyIfYouKnow "
        f"as a {email.invitation_type}!",
        "",
    ]
    if email.personal_message:
        lines += [f'Personal message: "{email.personal_message}"', ""]
    lines += [
        f"To accept this invitation, visit: {email.accept_url}",
        f"To decline this invitation, visit: {email.decline_url}",
        "",
        f"This invitation will expire in {email.expiry_days} days.",
        "",
        "Best regards,",
        "The OnlyIfYouKnow Team",
    ]
    return "\n".join(lines)
