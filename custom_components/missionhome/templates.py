# File: templates.py
"""Default pool of daily challenge suggestion templates.

Each template has a stable `key` (used for the per-user acceptance cooldown),
a display `title` and an `expValue`. The difficulty label is derived from
expValue when a suggestion is built, so it is not stored here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from . import const

if TYPE_CHECKING:
    from .type_defs import SuggestionTemplate


def _template(key: str, title: str, exp_value: int) -> SuggestionTemplate:
    return {
        const.DATA_TEMPLATE_KEY: key,
        const.DATA_TEMPLATE_TITLE: title,
        const.DATA_TEMPLATE_EXP_VALUE: exp_value,
    }  # type: ignore[return-value]


DEFAULT_TEMPLATES: tuple[SuggestionTemplate, ...] = (
    # Big jobs
    _template("vacuum_flat", "Vacuum the flat", 100),
    _template("wash_windows", "Wash the windows", 150),
    _template("mop_floor", "Mop the floor", 100),
    _template("disinfect_toilet", "Disinfect the toilet", 100),
    _template("wash_curtains", "Wash the curtains", 100),
    _template("clean_vents", "Clean the ventilation grilles", 150),
    _template("clean_washer_filter", "Clean the washing machine filter", 100),
    _template("cabinet_fronts", "Wipe the cabinet fronts", 100),
    _template("clean_oven", "Clean the oven", 150),
    _template("laundry", "Do the laundry (start and hang)", 100),
    _template("change_bedding", "Change the bedding", 100),
    _template("vacuum_sofa", "Vacuum the sofa / armchair", 100),
    _template("quick_bathroom", "Quick bathroom clean", 100),
    _template("clean_fridge", "Clean the inside of the fridge", 150),
    _template("clean_hood", "Clean the cooker hood / filter", 100),
    _template("clean_shower", "Clean the shower cabin", 100),
    _template("scrub_grout", "Scrub the grout (one section)", 150),
    _template("dust_radiators", "Dust the radiators", 100),
    _template("vacuum_mattress", "Vacuum the mattress", 100),
    _template("top_of_cabinets", "Wipe the top of the kitchen cabinets", 100),
    # Medium jobs
    _template("wash_dishes", "Wash the dishes", 50),
    _template("fold_clothes", "Put the clothes away", 50),
    _template("clean_sink", "Clean the sink and tap", 50),
    _template("clean_mirror", "Clean the mirror", 50),
    _template("wipe_tiles", "Wipe the kitchen tiles", 50),
    _template("tidy_desk", "Tidy the desk", 50),
    _template("tidy_cupboard", "Tidy one cupboard", 50),
    _template("tidy_drawer", "Tidy one drawer", 50),
    _template("wipe_handles", "Wipe door handles and switches", 50),
    _template("wipe_bin", "Wipe the rubbish bin", 50),
    _template("check_fridge", "Check the fridge and throw out spoiled food", 50),
    _template("descale_kettle", "Descale the kettle", 50),
    _template("clean_microwave", "Clean the microwave", 50),
    _template("clean_hob", "Clean the hob", 50),
    _template("dust_skirting", "Dust the skirting boards", 50),
    _template("wash_front_door", "Wash the front door", 50),
    _template("wash_sills", "Wash the window sills", 50),
    _template("dust", "Dust the shelves", 50),
    _template("empty_vacuum", "Empty the vacuum cleaner", 50),
    _template("wipe_table", "Wipe the table and chairs", 50),
    # Quick wins
    _template("kitchen_counter", "Clear the kitchen counter", 25),
    _template("recycling", "Take out cardboard / paper", 25),
    _template("sort_rubbish", "Sort the rubbish", 25),
    _template("take_out_trash", "Take out the trash", 25),
    _template("make_bed", "Make the bed", 25),
    _template("water_plants", "Water the plants", 25),
    _template("air_flat", "Air the flat for 5 minutes", 25),
    _template("put_away_10", "Put 10 things back where they belong", 25),
    _template("floor_pickup", "Pick things up off the floor (3 min)", 25),
    _template("fresh_towel", "Swap in a fresh towel", 25),
    _template("gather_laundry", "Gather clothes for washing", 25),
    _template("wipe_counters", "Wipe the counters", 25),
    _template("wipe_screens", "Wipe the TV / monitor", 25),
    _template("line_up_shoes", "Line up the shoes", 25),
    _template("speed_clean", "Do a 2 minute speed clean", 25),
    _template("collect_dishes", "Collect dishes from around the flat", 25),
    _template("declutter_one", "Throw away one thing you don't need", 25),
)
