from database import PRODUCTS

SECRET = "test-secret"


class RecordingMailer:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    def send(self, to, subject, html):
        if self.fail:
            raise ConnectionRefusedError("SMTP server unavailable")
        self.sent.append({"to": to, "subject": subject, "html": html})


def product_id(db, name):
    return str(db[PRODUCTS].find_one({"name": name})["_id"])


def stock_of(db, name):
    return db[PRODUCTS].find_one({"name": name})["stock"]


def register(client, name="Ada Lovelace", email="ada@example.com", password="s3cret-pass"):
    resp = client.post("/api/register", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def shipping_address():
    return {"street": "1 Main St", "city": "Springfield", "state": "IL", "zipCode": "62701", "country": "USA"}
