"""
Company repository - companies of one tenant namespace.
"""

from app.repositories.scoped_repository import ScopedRepository
from app.schemas.company import CompanyRead


class CompanyRepository(ScopedRepository[CompanyRead]):
    table_name = "companies"
    entity = "Company"
    read_schema = CompanyRead

    async def get_by_name(self, name: str) -> CompanyRead:
        return await self.get_by(name=name)
