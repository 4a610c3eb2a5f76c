"""
Flask dashboard for the goal line bet tracker backend
"""

from flask import Flask, flash, jsonify, redirect, render_template, request, url_for
from flask_cors import CORS
from datetime import datetime

from config import Config
from auth import login_required, token_store, validate_auth_form
from services import BetTrackerAPIClient, BackendAPIError, DashboardPoller, DashboardView
from services import charts, formatting
from logger import log

app = Flask(__name__, static_folder='static', template_folder='templates')
app.config['SECRET_KEY'] = Config.SECRET_KEY
CORS(app, resources={r"/api/*": {"origins": "*"}})
formatting.register_filters(app)

poller = DashboardPoller()


def _forget_session(token: str):
    poller.invalidate(token, forget_session=True)


token_store.on_expired = _forget_session


def make_client() -> BetTrackerAPIClient:
    """Backend client that sends the current session's bearer token"""
    return BetTrackerAPIClient(token_provider=token_store.get_token)


def _view_args(view: DashboardView) -> dict:
    args = {'tab': view.tab, 'page': view.page}
    if view.league_id is not None:
        args['league'] = view.league_id
    return args


def _wants_fragment() -> bool:
    return request.path.startswith('/api/') or request.path.startswith('/partials/')


@app.errorhandler(BackendAPIError)
def handle_backend_error(error: BackendAPIError):
    if error.is_unauthorized:
        log("Backend rejected the session token, logging out", "INFO")
        token = token_store.get_token()
        if token:
            poller.invalidate(token, forget_session=True)
        token_store.clear()
        if _wants_fragment():
            return jsonify({'error': 'Not authenticated'}), 401
        return redirect(url_for('index'))

    log(f"[ERROR] Unhandled backend error on {request.path}: {error}")
    if _wants_fragment():
        return jsonify({'error': error.message}), 502
    return render_template('error.html', message=error.message), 502


# Authentication

def handle_login(email: str, password: str) -> bool:
    try:
        response = make_client().login(email, password)
    except BackendAPIError as e:
        log(f"[WARNING] Login failed for {email}: {e}")
        return False

    if response.success and response.token and response.user:
        token_store.set_token(response.token)
        token_store.set_user(response.user)
        log(f"User {response.user.email} logged in", "INFO")
        return True
    return False


def handle_sign_up(email: str, password: str) -> bool:
    try:
        return make_client().sign_up(email, password).success
    except BackendAPIError as e:
        log(f"[WARNING] Sign up failed for {email}: {e}")
        return False


@app.route('/auth/<mode>', methods=['POST'])
def authenticate(mode):
    """
    POST /auth/login, POST /auth/signup

    Form fields: email, password, confirm_password (sign up only).
    """
    if mode not in ('login', 'signup'):
        return jsonify({'error': f'Unknown auth action {mode}'}), 404

    is_login = mode != 'signup'
    email = request.form.get('email', '').strip()
    password = request.form.get('password', '')
    confirm_password = request.form.get('confirm_password', '')

    error = validate_auth_form(email, password, confirm_password, is_login)
    if error:
        return render_template('landing.html', is_login=is_login, email=email, error=error), 400

    try:
        if is_login:
            if handle_login(email, password):
                return redirect(url_for('index'))
            return render_template('landing.html', is_login=True, email=email,
                                   error='Invalid email or password'), 401

        if handle_sign_up(email, password):
            return render_template('landing.html', is_login=True, email=email,
                                   success='Account created successfully! Please log in.')
        return render_template('landing.html', is_login=False, email=email,
                               error='Email already exists'), 409
    except Exception as e:
        log(f"[ERROR] Authentication handler failed: {e}")
        return render_template('landing.html', is_login=is_login, email=email,
                               error='Something went wrong. Please try again.'), 500


@app.route('/logout', methods=['GET', 'POST'])
def logout():
    """GET|POST /logout - clear the stored session and return to the landing page"""
    token = token_store.get_token()
    if token:
        poller.invalidate(token, forget_session=True)
    token_store.clear()
    return redirect(url_for('index'))


# Pages

@app.route('/')
def index():
    """Landing page (login / sign up) or the dashboard for authenticated users"""
    if not token_store.is_authenticated():
        return render_template('landing.html', is_login=request.args.get('mode') != 'signup')

    view = DashboardView.from_args(request.args)
    state = poller.snapshot(make_client(), token_store.get_token(), view)
    return render_template(
        'home.html',
        view=view,
        state=state,
        view_args=_view_args(view),
        pagination=formatting.pagination(state.total_matches, view.page, view.tab)
    )


@app.route('/statistics')
@login_required
def statistics():
    """GET /statistics (Protected)"""
    state = poller.snapshot(make_client(), token_store.get_token(), DashboardView())
    return render_template('statistics.html', stats=state.stats)


@app.route('/league/<league_id>')
@login_required
def league_detail(league_id):
    """GET /league/<league_id> (Protected); `table=1` opens the goal line table, `side=under` flips it"""
    try:
        league_id = int(league_id)
    except ValueError:
        league_id = 0
    if not league_id:
        return render_template('league_detail.html', league=None, error=None)

    show_table = request.args.get('table') == '1'
    show_over = request.args.get('side', 'over') != 'under'

    try:
        league = make_client().get_league_stats(league_id)
    except BackendAPIError as e:
        if e.is_unauthorized:
            raise
        log(f"[ERROR] Failed to fetch league data for {league_id}: {e}")
        return render_template('league_detail.html', league=None,
                               error=e.message or 'Failed to load league data'), 502

    return render_template(
        'league_detail.html',
        league=league,
        error=None,
        league_id=league_id,
        target_stats=league.target_stats,
        charts=charts.league_charts(league.goal_line_stats, league.target_line),
        show_table=show_table,
        show_over=show_over,
        rows=formatting.goal_line_rows(league.goal_line_stats, league.target_line, show_over)
    )


@app.route('/matches/<match_id>/odds-history')
@login_required
def odds_history(match_id):
    """Odds history panel; `?partial=1` returns only the panel for the modal"""
    try:
        match, history = make_client().get_odds_history(match_id)
    except BackendAPIError as e:
        if e.is_unauthorized:
            raise
        log(f"[ERROR] Failed to fetch odds history for {match_id}: {e}")
        match, history = None, []

    target = formatting.target_line(match.league_id) if match else Config.DEFAULT_TARGET_LINE
    template = 'partials/odds_history.html' if request.args.get('partial') else 'odds_history_page.html'
    return render_template(
        template,
        match=match,
        target=target,
        rows=formatting.odds_rows(history, target)
    )


@app.route('/export')
@login_required
def export_report():
    """Printable table of the current dashboard view"""
    view = DashboardView.from_args(request.args)
    state = poller.snapshot(make_client(), token_store.get_token(), view)
    return render_template(
        'report.html',
        tab_title='Live Matches' if view.tab == 'live' else 'History',
        league=formatting.league_name(view.league_id) if view.league_id else 'All Leagues',
        generated_at=datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
        total=len(state.matches),
        rows=formatting.report_rows(state.matches)
    )


# Polled fragments

@app.route('/partials/dashboard')
@login_required
def dashboard_fragment():
    """GET /partials/dashboard (Protected) - polled dashboard panel"""
    view = DashboardView.from_args(request.args)
    state = poller.snapshot(make_client(), token_store.get_token(), view)
    return render_template(
        'partials/dashboard_panel.html',
        view=view,
        state=state,
        view_args=_view_args(view),
        pagination=formatting.pagination(state.total_matches, view.page, view.tab)
    )


@app.route('/partials/statistics')
@login_required
def statistics_fragment():
    """GET /partials/statistics (Protected) - polled statistics body"""
    state = poller.snapshot(make_client(), token_store.get_token(), DashboardView())
    return render_template('partials/statistics_body.html', stats=state.stats)


# Tracker control

def _back_to_dashboard():
    view = DashboardView.from_args(request.form)
    return redirect(url_for('index', **_view_args(view)))


@app.route('/tracker/<action>', methods=['POST'])
@login_required
def tracker_control(action):
    """POST /tracker/start, /tracker/stop, /tracker/test-notification"""
    client = make_client()
    token = token_store.get_token()

    if action == 'test-notification':
        try:
            result = client.test_telegram()
            flash(result.get('message') or 'Test message sent', 'info')
        except BackendAPIError as e:
            if e.is_unauthorized:
                raise
            log(f"[ERROR] Failed to send test message: {e}")
            flash('Failed to send test message', 'error')
        return _back_to_dashboard()

    if action not in ('start', 'stop'):
        return jsonify({'error': f'Unknown tracker action {action}'}), 404

    try:
        if action == 'start':
            client.start_tracker()
        else:
            client.stop_tracker()
        log(f"Tracker {action} requested", "INFO")
    except BackendAPIError as e:
        if e.is_unauthorized:
            raise
        log(f"[ERROR] Failed to {action} tracker: {e}")
        flash(f'Failed to {action} tracker', 'error')

    # Next render refetches health
    poller.invalidate(token)
    return _back_to_dashboard()


# JSON API

@app.route('/api/snapshot', methods=['GET'])
@login_required
def api_snapshot():
    """
    GET /api/snapshot (Protected)

    Current polled state for the given tab/league/page query args.
    """
    view = DashboardView.from_args(request.args)
    state = poller.snapshot(make_client(), token_store.get_token(), view)
    return jsonify(state.to_dict()), 200


@app.route('/api/health', methods=['GET'])
def health_check():
    """
    GET /api/health (Public)

    Health of the dashboard itself; does not contact the backend.
    """
    return jsonify({
        'status': 'healthy',
        'backend_url': Config.BET_TRACKER_API_URL,
        'poll_interval_seconds': Config.POLL_INTERVAL_SECONDS,
        'cache': poller.cache_status()
    }), 200


if __name__ == '__main__':
    log("=" * 80)
    log("Goal Line Dashboard")
    log("=" * 80)
    log(f"Starting server on {Config.FLASK_HOST}:{Config.FLASK_PORT}")
    log(f"Backend: {Config.BET_TRACKER_API_URL}")
    log(f"Web interface: http://localhost:{Config.FLASK_PORT}/")

    app.run(
        host=Config.FLASK_HOST,
        port=Config.FLASK_PORT,
        debug=Config.FLASK_DEBUG
    )
