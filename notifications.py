"""
Order confirmation e-mails.

Delivery is best-effort: OrderNotifier.notify never raises, failures are only
logged. Routes schedule it as a background task so the response does not wait
for the SMTP round trip.
"""
import logging
import smtplib
from email.message import EmailMessage
from html import escape
from typing import Optional, Protocol

from config import Settings
from schemas import PlacedOrder

logger = logging.getLogger(__name__)

SUBJECT = "Order Confirmation - E-commerce Store"


class Mailer(Protocol):
    def send(self, to: str, subject: str, html: str) -> None: ...


class SmtpMailer:
    def __init__(self, settings: Settings, timeout: float = 10):
        self.host = settings.mail_host
        self.port = settings.mail_port
        self.user = settings.mail_user
        self.password = settings.mail_password
        self.sender = settings.mail_sender
        self.timeout = timeout

    def send(self, to, subject, html):
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("Your order has been received. View this message in an HTML-capable client for details.")
        msg.add_alternative(html, subtype="html")

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.ehlo()
            if smtp.has_extn("starttls"):
                smtp.starttls()
                smtp.ehlo()
            smtp.login(self.user, self.password)
            smtp.send_message(msg)


def _money(value):
    return f"${value:.2f}"


def render_order_confirmation(order: PlacedOrder) -> str:
    rows = "".join(
        f"<tr><td>{escape(item.name)}</td><td>{item.quantity}</td>"
        f"<td>{_money(item.price)}</td><td>{_money(item.price * item.quantity)}</td></tr>"
        for item in order.product_details
    )
    addr = order.shipping_address
    city_line = f"{addr.city or ''}, {addr.state or ''} {addr.zip_code or ''}".strip(" ,")
    return f"""
<h1>Order Confirmation</h1>
<p>Dear {escape(order.user.name or order.user.email)},</p>
<p>Thank you for your order! Here are your order details:</p>

<h2>Order Summary</h2>
<table border="1" style="border-collapse: collapse; width: 100%;">
  <thead><tr><th>Product</th><th>Quantity</th><th>Price</th><th>Total</th></tr></thead>
  <tbody>{rows}</tbody>
</table>

<h3>Total Amount: {_money(order.total_amount)}</h3>

<h2>Shipping Address</h2>
<p>{escape(addr.street or '')}<br>
   {escape(city_line)}<br>
   {escape(addr.country or '')}</p>

<p>Your order status: <strong>{order.status}</strong></p>
<p>We'll notify you when your order ships.</p>

<p>Best regards,<br>E-commerce Store Team</p>
"""


class OrderNotifier:
    def __init__(self, mailer: Optional[Mailer] = None):
        self.mailer = mailer

    def send_order_confirmation(self, order: PlacedOrder):
        if self.mailer is None:
            logger.info("Mail transport not configured. Skipping confirmation for order %s", order.id)
            return
        self.mailer.send(order.user.email, SUBJECT, render_order_confirmation(order))
        logger.info("Order confirmation e-mail sent for order %s", order.id)

    def notify(self, order: PlacedOrder):
        try:
            self.send_order_confirmation(order)
        except Exception:
            logger.exception("Error sending confirmation e-mail for order %s", order.id)


def build_notifier(settings: Settings) -> OrderNotifier:
    return OrderNotifier(SmtpMailer(settings) if settings.mail_enabled else None)
