"""
API router for species lookup.
"""
from fastapi import APIRouter, Path, Query
from typing import Annotated, List, Optional

from treemarket.api.dependencies import SpeciesClientDep
from treemarket.api.v1.models.responses import ERROR_RESPONSES, ErrorResponse
from treemarket.infrastructure.species_client import SpeciesDetail, SpeciesSuggestion


router = APIRouter(
    prefix="/species",
    tags=["species"],
)


@router.get(
    "/search",
    response_model=List[SpeciesSuggestion],
    summary="Autocomplete species names",
    description="""
    Suggest taxa from the Atlas of Living Australia for a partial name.
    Queries shorter than two characters return an empty list.
    """,
    responses={500: ERROR_RESPONSES[500]},
)
async def search_species(
    species_client: SpeciesClientDep,
    q: Annotated[Optional[str], Query(description="Partial scientific or common name")] = None,
) -> List[SpeciesSuggestion]:
    return await species_client.search(q)


@router.get(
    "/{guid:path}",
    response_model=SpeciesDetail,
    summary="Get species details",
    responses={
        404: {"model": ErrorResponse, "description": "Species not found"},
        500: ERROR_RESPONSES[500],
    },
)
async def get_species(
    guid: Annotated[str, Path(description="Taxon GUID, often itself a URL")],
    species_client: SpeciesClientDep,
) -> SpeciesDetail:
    return await species_client.get_species(guid)
