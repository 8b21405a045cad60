# OAuth2 client side of the seats.aero consent flow.
