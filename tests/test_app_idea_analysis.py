"""
Unit tests for the app idea analysis routes.
Tests the checker page and the /api/analyze endpoint with the analysis
service mocked out.
"""
import pytest
from unittest.mock import patch


APP_IDEA = (
    "I want to create an iOS app that helps users track their daily water "
    "intake with reminders and weekly insights."
)

NON_COMPLIANT_REPORT = {
    'violations': [
        {
            'guideline': '5.1.1 Data Collection and Storage',
            'explanation': 'The app collects health data without a stated privacy policy.',
            'probability': 0.9
        },
        {
            'guideline': '4.2 Minimum Functionality',
            'explanation': 'Reminder-only apps may be considered too limited.',
            'probability': 0.45
        }
    ],
    'isCompliant': False
}

COMPLIANT_REPORT = {'violations': [], 'isCompliant': True}


@pytest.fixture
def app():
    """Create Flask app for testing."""
    from main import app as flask_app

    flask_app.config['TESTING'] = True
    flask_app.config['SECRET_KEY'] = 'test-secret-key'
    flask_app.config['MIN_IDEA_LENGTH'] = 50
    flask_app.config['MAX_IDEA_LENGTH'] = 5000

    return flask_app


@pytest.fixture
def client(app):
    """Create Flask test client."""
    return app.test_client()


class TestAnalyzeApi:
    """Test suite for POST /api/analyze."""

    def test_happy_path_returns_report(self, client):
        with patch('main.run_compliance_check') as mock_check:
            mock_check.return_value = NON_COMPLIANT_REPORT

            response = client.post('/api/analyze', json={'appIdea': APP_IDEA})

            assert response.status_code == 200
            assert response.get_json() == NON_COMPLIANT_REPORT
            mock_check.assert_called_once_with(APP_IDEA, min_length=50, max_length=5000)

    def test_short_idea_returns_400(self, client):
        with patch('guideline_checker.services.analysis_orchestrator.analyze_app_idea') as mock_analyze:
            response = client.post('/api/analyze', json={'appIdea': 'Too short'})

            assert response.status_code == 400
            assert 'at least 50 characters' in response.get_json()['error']
            mock_analyze.assert_not_called()

    def test_missing_field_returns_400(self, client):
        response = client.post('/api/analyze', json={'idea': APP_IDEA})

        assert response.status_code == 400
        assert response.get_json()['error'] == 'App idea is required.'

    def test_non_json_body_returns_400(self, client):
        response = client.post('/api/analyze', data='appIdea=hello', content_type='text/plain')

        assert response.status_code == 400
        assert 'error' in response.get_json()

    def test_analysis_failure_returns_500(self, client):
        with patch('guideline_checker.services.analysis_orchestrator.analyze_app_idea') as mock_analyze:
            mock_analyze.side_effect = RuntimeError('AI analysis request timed out')

            response = client.post('/api/analyze', json={'appIdea': APP_IDEA})

            assert response.status_code == 500
            assert response.get_json() == {'error': 'Failed to analyze app idea'}

    def test_unexpected_exception_returns_500(self, client):
        with patch('main.run_compliance_check') as mock_check:
            mock_check.side_effect = KeyError('boom')

            response = client.post('/api/analyze', json={'appIdea': APP_IDEA})

            assert response.status_code == 500
            assert response.get_json() == {'error': 'Failed to analyze app idea'}

    def test_configured_limits_are_applied(self, app, client):
        app.config['MAX_IDEA_LENGTH'] = 60

        response = client.post('/api/analyze', json={'appIdea': APP_IDEA})

        assert response.status_code == 400
        assert 'at most 60 characters' in response.get_json()['error']


class TestCheckerPage:
    """Test suite for the form flow on /."""

    def test_get_renders_form(self, client):
        response = client.get('/')

        assert response.status_code == 200
        assert b'App Store Guidelines Checker' in response.data
        assert b'Describe your app idea in detail' in response.data
        assert b'name="appIdea"' in response.data
        assert b'minlength="50"' in response.data
        assert b'Detailed Analysis' not in response.data

    def test_post_renders_violations_with_confidence(self, client):
        with patch('main.run_compliance_check') as mock_check:
            mock_check.return_value = NON_COMPLIANT_REPORT

            response = client.post('/', data={'appIdea': APP_IDEA})

            assert response.status_code == 200
            data = response.data.decode('utf-8')
            assert 'Potential Guidelines Violations Found' in data
            assert 'Detailed Analysis:' in data
            assert '5.1.1 Data Collection and Storage' in data
            assert 'Confidence: 90%' in data
            assert 'Confidence: 45%' in data
            # Submitted text is kept in the form
            assert APP_IDEA in data

    def test_confidence_rounds_halves_up(self, client):
        report = {
            'violations': [
                {'guideline': '3.1.1 In-App Purchase', 'explanation': 'Unlocks via web', 'probability': 0.625}
            ],
            'isCompliant': False
        }
        with patch('main.run_compliance_check') as mock_check:
            mock_check.return_value = report

            response = client.post('/', data={'appIdea': APP_IDEA})

            assert b'Confidence: 63%' in response.data

    def test_whitespace_only_idea_gets_length_message(self, client):
        response = client.post('/api/analyze', json={'appIdea': '     '})

        assert response.status_code == 400
        assert 'at least 50 characters' in response.get_json()['error']

    def test_post_renders_compliant_notice(self, client):
        with patch('main.run_compliance_check') as mock_check:
            mock_check.return_value = COMPLIANT_REPORT

            response = client.post('/', data={'appIdea': APP_IDEA})

            assert response.status_code == 200
            assert b'No Major Issues Found' in response.data
            assert b'Potential Guidelines Violations Found' not in response.data
            assert b'Detailed Analysis' not in response.data

    def test_short_idea_flashes_warning(self, client):
        response = client.post('/', data={'appIdea': 'Too short'})

        assert response.status_code == 400
        assert b'at least 50 characters' in response.data

    def test_analysis_failure_flashes_error(self, client):
        with patch('main.run_compliance_check') as mock_check:
            mock_check.side_effect = RuntimeError('Failed to analyze app idea')

            response = client.post('/', data={'appIdea': APP_IDEA})

            assert response.status_code == 500
            assert b'Failed to analyze app idea' in response.data


class TestPercentFilter:
    """Tests for the percent template filter."""

    @pytest.mark.parametrize('probability, expected', [
        (0.9, '90%'),
        (0.456, '46%'),
        (1, '100%'),
        (0.31, '31%'),
        (0.625, '63%'),
        (0.125, '13%'),
        (0.325, '33%'),
        (0.875, '88%')
    ])
    def test_rounds_to_whole_percent(self, probability, expected):
        from main import percent_filter
        assert percent_filter(probability) == expected


# Run tests with: pytest tests/test_app_idea_analysis.py -v
if __name__ == '__main__':
    pytest.main([__file__, '-v', '-s'])
