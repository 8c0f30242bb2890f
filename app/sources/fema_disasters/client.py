"""
OpenFEMA disaster declarations client.

Official OpenFEMA API documentation:
https://www.fema.gov/about/openfema/api

DisasterDeclarationsSummaries returns one row per designated area and
program for each federally declared disaster (1953-present).

No API key required (free public API).
"""

import logging
from datetime import date, timedelta
from typing import Any, Dict, Optional

from app.core.http_client import BaseAPIClient
from app.sources.fema_disasters.metadata import DEFAULT_YEARS, split_fips

logger = logging.getLogger(__name__)


class OpenFEMAClient(BaseAPIClient):
    """HTTP client for OpenFEMA disaster declaration summaries."""

    SOURCE_NAME = "openfema"

    DATASET = "DisasterDeclarationsSummaries"
    MAX_RECORDS = 1000
    SELECT_FIELDS = [
        "id",
        "disasterNumber",
        "incidentType",
        "declarationTitle",
        "state",
        "declarationDate",
        "incidentBeginDate",
        "incidentEndDate",
        "designatedArea",
        "ihProgramDeclared",
        "iaProgramDeclared",
        "paProgramDeclared",
        "hmProgramDeclared",
        "fipsStateCode",
        "fipsCountyCode",
    ]

    async def get_county_declarations(
        self,
        fips_code: str,
        years: int = DEFAULT_YEARS,
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        """
        Fetch declarations for a county, newest first.

        Args:
            fips_code: 5-digit county FIPS code (state + county)
            years: Lookback window in years
            today: End of the window (defaults to the current date)

        Returns:
            Raw OpenFEMA response ({"DisasterDeclarationsSummaries": [...]})

        Raises:
            ValidationError: If the FIPS code is malformed (no request is sent)
        """
        state_code, county_code = split_fips(fips_code)
        end = today or date.today()
        start = end - timedelta(days=round(365.25 * years))

        params = {
            "$filter": (
                f"fipsStateCode eq '{state_code}' and fipsCountyCode eq '{county_code}' "
                f"and declarationDate ge '{start.isoformat()}'"
            ),
            "$orderby": "declarationDate desc",
            "$top": self.MAX_RECORDS,
            "$select": ",".join(self.SELECT_FIELDS),
        }

        return await self.get(
            self.DATASET, params=params, resource_id=f"declarations for {fips_code}"
        )
