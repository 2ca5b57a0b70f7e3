"""
MoveMate Backend — Services Layer
==================================

What:  Business rules between the routes (HTTP) and the repository (SQL).

Service Inventory (leaves first):
    - region_classifier:      free-text address → RegionCode
    - pagination:             page / page-size normalization
    - driver_eligibility:     is this user a configured driver?
    - request_matcher:        the driver's filtered, sorted, paged request pool
    - estimate_decision:      accept / reject / update state machine
    - result_assembler:       candidates → listing response
    - driver_request_service: facade used by the routes
"""
