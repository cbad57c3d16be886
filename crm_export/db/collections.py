"""Collection names of the CRM database, as the CRM application created them."""

from __future__ import annotations

STOCK = "nuovaGiacenza"
PRODUCT = "prodottis"
CATEGORY = "categoriaprodottis"
BRAND = "marcaprodottis"
PRODUCT_TYPE = "tipologiaprodottis"
MODEL = "modelloprodottis"
COLOR = "coloreprodottis"
SIZE = "tagliaclientes"
WAREHOUSE = "magazzinis"
SUPPLIER = "fornitoris"
LOAD_RECORD = "caricoscaricos"
CLIENT = "clientes"
APPOINTMENT = "appuntamentos"
ATELIER = "ateliers"
EMPLOYEE = "users"
CLIENT_PRODUCT = "prodotticlientes"

# ``tipoCarico`` values on load records.
INBOUND_LOAD = "Carico"
OUTBOUND_LOAD = "Scarico"
