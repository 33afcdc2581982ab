"""
Operations layer for the divelist core.

Business logic operations - plain functions taking the AppContext (or
the tables they work on) explicitly.
"""

from .trip_ops import (
    alloc_trip,
    insert_trip,
    unregister_trip,
    delete_trip,
    create_trip_from_dive,
    create_and_hookup_trip_from_dive,
    add_dive_to_trip,
    unregister_dive_from_trip,
    remove_dive_from_trip,
    combine_trips,
    trip_is_single_day,
    trip_shown_dives,
    trips_overlap,
    get_trip_for_new_dive,
    get_dives_to_autogroup,
    autogroup_dives,
    dump_trip_list,
)

from .dive_ops import (
    get_dive,
    get_divenr,
    get_idx_by_uniq_id,
    get_dive_by_uniq_id,
    select_dive,
    deselect_dive,
    select_dives_in_trip,
    deselect_dives_in_trip,
    filter_dive,
    first_selected_dive,
    last_selected_dive,
    consecutive_selected,
    dump_selection,
    set_autogroup,
    delete_dive_from_table,
    clear_table,
    unregister_dive,
    delete_single_dive,
    add_single_dive,
    is_trip_before_after,
    get_surface_interval,
    get_dive_id_closest_to,
    find_next_visible_dive,
    get_dive_nr_at_idx,
    set_dive_nr_for_current_dive,
    mark_divelist_changed,
    unsaved_changes,
    get_min_datafile_version,
    reset_min_datafile_version,
    report_datafile_version,
    process_loaded_dives,
    clear_dive_file_data,
    total_weight,
)

from .import_ops import (
    merge_imported_dives,
    try_to_merge_into,
    dive_is_after_last,
    merge_dive_tables,
    try_to_merge_trip,
    process_imported_dives,
    apply_import_plan,
    add_imported_dives,
)

from .physiology_ops import (
    CNS_TABLE,
    CnsLimit,
    get_dive_gas,
    get_dive_gas_string,
    calculate_otu,
    calculate_cns_dive,
    calculate_cns,
    calculate_airuse,
    calculate_sac,
    add_dive_to_deco,
    init_decompression,
    create_deco_state,
    update_cylinder_related_info,
)

__all__ = [
    # Trip operations
    "alloc_trip",
    "insert_trip",
    "unregister_trip",
    "delete_trip",
    "create_trip_from_dive",
    "create_and_hookup_trip_from_dive",
    "add_dive_to_trip",
    "unregister_dive_from_trip",
    "remove_dive_from_trip",
    "combine_trips",
    "trip_is_single_day",
    "trip_shown_dives",
    "trips_overlap",
    "get_trip_for_new_dive",
    "get_dives_to_autogroup",
    "autogroup_dives",
    "dump_trip_list",
    # Dive operations
    "get_dive",
    "get_divenr",
    "get_idx_by_uniq_id",
    "get_dive_by_uniq_id",
    "select_dive",
    "deselect_dive",
    "select_dives_in_trip",
    "deselect_dives_in_trip",
    "filter_dive",
    "first_selected_dive",
    "last_selected_dive",
    "consecutive_selected",
    "dump_selection",
    "set_autogroup",
    "delete_dive_from_table",
    "clear_table",
    "unregister_dive",
    "delete_single_dive",
    "add_single_dive",
    "is_trip_before_after",
    "get_surface_interval",
    "get_dive_id_closest_to",
    "find_next_visible_dive",
    "get_dive_nr_at_idx",
    "set_dive_nr_for_current_dive",
    "mark_divelist_changed",
    "unsaved_changes",
    "get_min_datafile_version",
    "reset_min_datafile_version",
    "report_datafile_version",
    "process_loaded_dives",
    "clear_dive_file_data",
    "total_weight",
    # Import operations
    "merge_imported_dives",
    "try_to_merge_into",
    "dive_is_after_last",
    "merge_dive_tables",
    "try_to_merge_trip",
    "process_imported_dives",
    "apply_import_plan",
    "add_imported_dives",
    # Physiology operations
    "CNS_TABLE",
    "CnsLimit",
    "get_dive_gas",
    "get_dive_gas_string",
    "calculate_otu",
    "calculate_cns_dive",
    "calculate_cns",
    "calculate_airuse",
    "calculate_sac",
    "add_dive_to_deco",
    "init_decompression",
    "create_deco_state",
    "update_cylinder_related_info",
]
