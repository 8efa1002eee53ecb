"""Testes do registro de pipelines por role."""

import pytest

from apps.core.pipelines import (
    ROLE_PIPELINES,
    TERMINAL_STAGE,
    VIEWABLE_ROLES,
    InvalidRoleError,
    first_stage,
    get_pipeline,
    is_terminal,
    is_valid_status,
    validate_role,
)


class TestPipelines:
    def test_every_non_empty_pipeline_ends_in_done(self):
        for role, stages in ROLE_PIPELINES.items():
            if stages:
                assert stages[-1] == TERMINAL_STAGE, role

    def test_admin_has_no_pipeline(self):
        assert get_pipeline('admin') == ()
        assert 'admin' not in VIEWABLE_ROLES

    def test_viewable_roles(self):
        assert VIEWABLE_ROLES == ('estimation', 'designer', 'operations')

    def test_designer_stages_in_order(self):
        assert get_pipeline('designer') == (
            'TO DO LIST', 'MOCKUP PENDING', 'PRODUCTION', 'PENDING WITH CLIENT', 'DONE',
        )

    def test_estimation_has_seven_stages(self):
        assert len(get_pipeline('estimation')) == 7
        assert first_stage('estimation') == 'TO DO LIST'

    def test_is_terminal(self):
        assert is_terminal('DONE')
        assert not is_terminal('PRODUCTION')

    def test_is_valid_status(self):
        assert is_valid_status('operations', 'DELIVERY')
        assert not is_valid_status('designer', 'DELIVERY')
        assert not is_valid_status('admin', 'DONE')
        assert not is_valid_status('ghost', 'DONE')


class TestValidateRole:
    def test_known_role_passes_through(self):
        assert validate_role('designer') == 'designer'

    @pytest.mark.parametrize('value', ['Designer', '', None, 'manager'])
    def test_unknown_role_raises(self, value):
        with pytest.raises(InvalidRoleError):
            validate_role(value)

    def test_error_is_a_value_error(self):
        assert issubclass(InvalidRoleError, ValueError)
