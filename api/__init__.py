"""FlightOracle HTTP API."""
