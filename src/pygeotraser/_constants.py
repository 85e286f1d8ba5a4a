"""Internal constants shared across the library."""

BASE_URL = "https://navigationasistance-backend-1.onrender.com"
USER_AGENT = "pygeotraser"

# ------------------------------------------------------------------
# Collector endpoints
# ------------------------------------------------------------------

POSITION_ENDPOINT = "/nadadorposicion/agregar"
TERMINATE_ENDPOINT = "/nadadorposicion/eliminar"
EMERGENCY_ENDPOINT = "/nadadorposicion/emergency"
HISTORIC_ENDPOINT = "/nadadorhistoricorutas/agregar"

# ------------------------------------------------------------------
# Live map pages, keyed by lower-cased group id
# ------------------------------------------------------------------

MAP_BASE_URL = "https://navigationasistance-frontend.vercel.app"
GROUP_MAP_PAGES: dict[str, str] = {
    "regatas": "maparepew.html",
    "cavent": "mapaca1.html",
    "otsudan": "mapaop.html",
}
