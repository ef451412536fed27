# Flask routes only

from flask import Flask, jsonify, request

from . import deploy, signature
from .config import DeployConfig


def create_app(config: DeployConfig) -> Flask:
    """
    Build the webhook app around one config and one deploy guard.
    Each call gets its own trigger, so tests can run isolated apps side by side.
    """
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.max_body

    trigger = deploy.DeployTrigger(config.command, config.timeout, config.busy_wait)
    app.extensions["deploy_trigger"] = trigger

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"ok": True, "deploying": trigger.busy})

    @app.route("/webhook", methods=["POST"])
    def webhook():
        sent_sig = request.headers.get(signature.SIGNATURE_HEADER, "")
        body = request.get_data(cache=True)

        if not sent_sig or not body:
            print(f"[webhook] malformed request from {request.remote_addr}: "
                  f"{'no signature header' if not sent_sig else 'empty body'}")
            return jsonify({"error": f"missing {signature.SIGNATURE_HEADER} header or body"}), 403

        if not signature.verify_signature(config.secret, body, sent_sig):
            print(f"[webhook] invalid signature from {request.remote_addr}")
            return jsonify({"error": "invalid signature"}), 403

        print("[webhook] signature verified, triggering deploy")
        try:
            outcome = trigger.run()
        except deploy.DeployBusy as e:
            print("[webhook] deploy already running, rejecting")
            return jsonify({"success": False, "error": str(e)}), 409
        except deploy.DeployExecutionError as e:
            print(f"[webhook] deploy failed: {e}")
            return jsonify({"success": False, "error": str(e)}), 500

        print("[webhook] deploy finished")
        return jsonify({
            "success": True,
            "msg": "deploy finished",
            "output": outcome.stdout,
        }), 200

    return app
