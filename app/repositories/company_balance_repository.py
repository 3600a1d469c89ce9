"""
Company balance repository.
"""

from typing import List

from app.repositories.scoped_repository import ScopedRepository
from app.schemas.company_balance import CompanyBalanceRead


class CompanyBalanceRepository(ScopedRepository[CompanyBalanceRead]):
    table_name = "company_balances"
    entity = "CompanyBalance"
    read_schema = CompanyBalanceRead
    touch_column = "last_updated"

    async def get_for_week(self, company_name: str, week_label: str) -> CompanyBalanceRead:
        return await self.get_by(company_name=company_name, week_label=week_label)

    async def list_by_company(self, company_name: str) -> List[CompanyBalanceRead]:
        return await self.list_by(company_name=company_name)
