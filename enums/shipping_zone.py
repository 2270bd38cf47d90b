from enum import Enum


class ShippingZone(str, Enum):
    USA = "USA"
    CANADA = "CANADA"
    MEXICO = "MEXICO"
    UK = "UK"
    EU_1 = "EU-1"
    EU_2 = "EU-2"
    EU_3 = "EU-3"
    AUSTRALIA = "AUSTRALIA"
    NEW_ZEALAND = "NEW ZEALAND"
    CHINA_HONG_KONG = "CHINA / HONG KONG"
    ASIA = "ASIA"
    INDIA = "INDIA"
    REST_OF_WORLD = "REST OF WORLD"  # Fallback, must stay the most expensive zone
