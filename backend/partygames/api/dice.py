from flask import Blueprint, jsonify

from partygames.services.dice import roll

dice = Blueprint('dice', __name__)


@dice.route('/roll', methods=['POST'])
def roll_dice():
    return jsonify(roll())
