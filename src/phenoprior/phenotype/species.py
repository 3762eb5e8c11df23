"""Per-species capability bundles used by the matching code."""

from pydantic import BaseModel, ConfigDict

from phenoprior.phenotype.models import Species


class SpeciesProfile(BaseModel):
    """What differs between species when matching a human query.

    Attributes:
        species: Organism
        ontology_prefix: Id prefix of the organism's phenotype ontology
        self_match: True if query terms can match themselves (same ontology),
            making a term its own idealised counterpart in the baseline
        display_name: Name used in evidence text
        model_kind: Noun used for a model of this species in evidence text
    """

    model_config = ConfigDict(frozen=True)

    species: Species
    ontology_prefix: str
    self_match: bool
    display_name: str
    model_kind: str


SPECIES_PROFILES: dict[Species, SpeciesProfile] = {
    Species.HUMAN: SpeciesProfile(
        species=Species.HUMAN,
        ontology_prefix="HP",
        self_match=True,
        display_name="human",
        model_kind="disease",
    ),
    Species.MOUSE: SpeciesProfile(
        species=Species.MOUSE,
        ontology_prefix="MP",
        self_match=False,
        display_name="mouse",
        model_kind="mouse mutant",
    ),
    Species.FISH: SpeciesProfile(
        species=Species.FISH,
        ontology_prefix="ZP",
        self_match=False,
        display_name="zebrafish",
        model_kind="zebrafish mutant",
    ),
}


def profile_for(species: Species) -> SpeciesProfile:
    return SPECIES_PROFILES[species]
