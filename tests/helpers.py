"""Request helpers shared by the API tests."""


def legacy_headers(name="Ann", email="ann@example.com"):
    return {"Authorization": f"Bearer {name}:{email}"}


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
