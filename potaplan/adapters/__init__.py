from .pota_client import PotaClient
from .weather_client import OpenMeteoClient
