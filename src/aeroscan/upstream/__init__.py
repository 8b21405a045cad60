# seats.aero partner API access.
