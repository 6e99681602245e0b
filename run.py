# COVID-19 Dashboard - Launch Options
#
# 1. Dash dashboard:
#      python run.py        (or: python dashboard.py)
#    Then open http://localhost:8050
#
# Environment overrides:
#      PORT, COVID_REFRESH_MINUTES, COVID_AREA_URL,
#      COVID_COUNTRIES_SNAPSHOT, COVID_WORLD_GEOJSON, COVID_HTTP_TIMEOUT

import logging

from dashboard import app, PORT

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.run(debug=False, port=PORT)
