"""
Example: Inertial EKF Prediction (Time Update Only)

Drives a RobotContext with a noisy IMU along a horizontal circle and
propagates the 19-state estimate and its covariance without any
measurement update. Shows how the predicted 3σ envelope grows together with
the actual drift.

Implements:
    - Quaternion attitude update q' = q ⊗ exp(ω dt)
    - Velocity update with the estimated gravity vector
    - Covariance propagation P' = Jx P Jxᵀ + Jn Q Jnᵀ

Usage:
    python examples/example_inertial_prediction.py
"""

import time
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from tqdm import tqdm

from inslam.coords import euler_to_quat, quat_to_euler, quat_to_rotmat
from inslam.estimators import RobotConfig, RobotContext
from inslam.models import InertialState
from inslam.models.state_layout import P_SLICE, Q_SLICE, V_SLICE
from inslam.sensors import ImuNoiseParams, ImuSeries

GRAVITY = np.array([0.0, 0.0, -9.81])


def generate_circle_trajectory(duration=60.0, dt=0.01, radius=10.0, period=30.0):
    """
    Generate a level circular trajectory with the body x axis along the velocity.

    Args:
        duration: Total duration [s].
        dt: Time step [s].
        radius: Circle radius [m].
        period: Time for one lap [s].

    Returns:
        Tuple of (t, pos_true, vel_true, yaw_true, accel_true, gyro_true),
        where accel_true is the body-frame specific force.
    """
    t = np.arange(0, duration, dt)
    omega = 2 * np.pi / period
    phase = omega * t

    pos_true = np.column_stack([radius * np.cos(phase), radius * np.sin(phase), np.zeros_like(t)])
    vel_true = np.column_stack([
        -radius * omega * np.sin(phase),
        radius * omega * np.cos(phase),
        np.zeros_like(t),
    ])
    acc_world = np.column_stack([
        -radius * omega**2 * np.cos(phase),
        -radius * omega**2 * np.sin(phase),
        np.zeros_like(t),
    ])
    yaw_true = np.unwrap(phase + np.pi / 2)

    # Specific force in body frame: f = Rᵀ (a - g)
    accel_true = np.zeros_like(acc_world)
    for k, yaw in enumerate(yaw_true):
        R = quat_to_rotmat(euler_to_quat(0.0, 0.0, yaw))
        accel_true[k] = R.T @ (acc_world[k] - GRAVITY)

    gyro_true = np.column_stack([np.zeros_like(t), np.zeros_like(t), np.full_like(t, omega)])

    return t, pos_true, vel_true, yaw_true, accel_true, gyro_true


def simulate_imu(t, accel_true, gyro_true, params, rng):
    """
    Corrupt true IMU signals with constant biases and white noise.

    Args:
        t: Time array [s], shape (N,).
        accel_true: True specific force [m/s²], shape (N, 3).
        gyro_true: True angular rate [rad/s], shape (N, 3).
        params: ImuNoiseParams of the simulated sensor.
        rng: numpy random Generator.

    Returns:
        Tuple of (ImuSeries, accel_bias, gyro_bias).
    """
    dt = t[1] - t[0]
    N = len(t)

    gyro_bias = rng.normal(size=3) * params.gyro_bias_rad_s
    accel_bias = rng.normal(size=3) * params.accel_bias_mps2

    gyro_noise = rng.normal(size=(N, 3)) * params.gyro_arw_rad_sqrt_s / np.sqrt(dt)
    accel_noise = rng.normal(size=(N, 3)) * params.accel_vrw_mps_sqrt_s / np.sqrt(dt)

    series = ImuSeries(
        t=t,
        accel=accel_true + accel_bias + accel_noise,
        gyro=gyro_true + gyro_bias + gyro_noise,
        meta={'sample_rate_hz': 1.0 / dt, 'grade': params.grade},
    )
    return series, accel_bias, gyro_bias


def run_prediction(imu, x0, P0, config):
    """
    Run the prediction-only loop.

    Returns:
        Tuple of (states, sigmas): states (N, 19) and the square roots of
        the covariance diagonal (N, 19).
    """
    robot = RobotContext.from_config(config, x0, P0)
    N = len(imu)

    states = np.zeros((N, x0.size))
    sigmas = np.zeros((N, x0.size))
    states[0], P = robot.get_state()
    sigmas[0] = np.sqrt(np.diag(P))

    for k in tqdm(range(1, N), desc="EKF prediction", unit="step"):
        sample = imu[k - 1]
        robot.set_control(sample.to_control())
        robot.move(imu.t[k] - imu.t[k - 1])

        states[k], P = robot.get_state()
        sigmas[k] = np.sqrt(np.diag(P))

    return states, sigmas


def plot_results(t, pos_true, yaw_true, states, sigmas, figs_dir):
    """
    Plot trajectory, position error with its 3σ bound, and yaw error.

    Returns:
        Tuple of (pos_error, yaw_error_deg).
    """
    pos_est = states[:, P_SLICE]
    yaw_est = np.unwrap(quat_to_euler(states[:, Q_SLICE])[:, 2])
    pos_error = np.linalg.norm(pos_est - pos_true, axis=1)
    pos_sigma = np.sqrt(np.sum(sigmas[:, P_SLICE]**2, axis=1))
    yaw_error_deg = np.rad2deg(yaw_est - yaw_true)

    # Figure 1: Trajectory
    fig1, ax1 = plt.subplots(figsize=(8, 8))
    ax1.plot(pos_true[:, 0], pos_true[:, 1], 'k-', linewidth=2, label='True')
    ax1.plot(pos_est[:, 0], pos_est[:, 1], 'r--', linewidth=2, label='Predicted (no updates)')
    ax1.scatter(pos_true[0, 0], pos_true[0, 1], c='g', s=100, marker='o', label='Start', zorder=5)
    ax1.set_xlabel('East [m]', fontsize=12)
    ax1.set_ylabel('North [m]', fontsize=12)
    ax1.set_title('Inertial Prediction: Trajectory', fontsize=14)
    ax1.legend(fontsize=10)
    ax1.grid(True, alpha=0.3)
    ax1.axis('equal')
    plt.tight_layout()
    fig1.savefig(figs_dir / 'inertial_prediction_trajectory.svg', dpi=300, bbox_inches='tight')
    print(f"  [OK] Saved: {figs_dir / 'inertial_prediction_trajectory.svg'}")

    # Figure 2: Position error against predicted uncertainty
    fig2, ax2 = plt.subplots(figsize=(12, 6))
    ax2.plot(t, pos_error, 'r-', linewidth=2, label='Position error')
    ax2.plot(t, 3 * pos_sigma, 'b--', linewidth=1.5, label='3σ (predicted)')
    ax2.set_xlabel('Time [s]', fontsize=12)
    ax2.set_ylabel('Position [m]', fontsize=12)
    ax2.set_title('Inertial Prediction: Error vs Predicted Uncertainty', fontsize=14)
    ax2.legend(fontsize=10)
    ax2.grid(True, alpha=0.3)
    ax2.set_xlim([0, t[-1]])
    plt.tight_layout()
    fig2.savefig(figs_dir / 'inertial_prediction_error.svg', dpi=300, bbox_inches='tight')
    print(f"  [OK] Saved: {figs_dir / 'inertial_prediction_error.svg'}")

    # Figure 3: Yaw error
    fig3, ax3 = plt.subplots(figsize=(12, 4))
    ax3.plot(t, yaw_error_deg, 'r-', linewidth=2)
    ax3.set_xlabel('Time [s]', fontsize=12)
    ax3.set_ylabel('Yaw Error [deg]', fontsize=12)
    ax3.set_title('Inertial Prediction: Yaw Error', fontsize=14)
    ax3.grid(True, alpha=0.3)
    plt.tight_layout()
    fig3.savefig(figs_dir / 'inertial_prediction_yaw.svg', dpi=300, bbox_inches='tight')
    print(f"  [OK] Saved: {figs_dir / 'inertial_prediction_yaw.svg'}")

    plt.close('all')

    return pos_error, yaw_error_deg


def main():
    """Main execution function."""
    print("\n" + "=" * 60)
    print("Inertial EKF Prediction (Time Update Only)")
    print("=" * 60)

    duration = 60.0
    dt = 0.01
    params = ImuNoiseParams.consumer_grade()
    rng = np.random.default_rng(42)

    print("\nConfiguration:")
    print(f"  Duration:        {duration} s")
    print(f"  IMU Rate:        {1 / dt:.0f} Hz")
    print(params.format_specs())

    print("\nGenerating trajectory...")
    t, pos_true, vel_true, yaw_true, accel_true, gyro_true = generate_circle_trajectory(
        duration=duration, dt=dt
    )

    print("Simulating IMU...")
    imu, accel_bias, gyro_bias = simulate_imu(t, accel_true, gyro_true, params, rng)
    print(f"  Gyro bias:       {np.rad2deg(gyro_bias) * 3600} deg/hr")
    print(f"  Accel bias:      {accel_bias * 1000 / 9.80665} mg")

    # Initial state known exactly except for the unknown sensor biases
    x0 = InertialState.at_rest(q=euler_to_quat(0.0, 0.0, yaw_true[0])).to_vector()
    x0[P_SLICE] = pos_true[0]
    x0[V_SLICE] = vel_true[0]

    sigma0 = np.concatenate([
        np.full(3, 1e-3),                        # p
        np.full(4, 1e-4),                        # q
        np.full(3, 1e-3),                        # v
        np.full(3, params.accel_bias_mps2),      # ab
        np.full(3, params.gyro_bias_rad_s),      # wb
        np.full(3, 1e-3),                        # g
    ])
    P0 = np.diag(sigma0**2)

    config = RobotConfig(model='inertial', imu_noise=params, max_dt=2 * dt)

    print("\nRunning prediction...")
    start_time = time.time()
    states, sigmas = run_prediction(imu, x0, P0, config)
    elapsed = time.time() - start_time
    print(f"  Computation time: {elapsed:.3f} s ({duration / elapsed:.0f}x real-time)")

    figs_dir = Path(__file__).parent / 'figs'
    figs_dir.mkdir(exist_ok=True)

    print("\nGenerating plots...")
    pos_error, yaw_error_deg = plot_results(t, pos_true, yaw_true, states, sigmas, figs_dir)

    final_sigma = np.sqrt(np.sum(sigmas[-1, P_SLICE]**2))
    quat_norm_dev = np.max(np.abs(np.linalg.norm(states[:, Q_SLICE], axis=1) - 1.0))

    print("\n" + "=" * 60)
    print("RESULTS (prediction only)")
    print("=" * 60)
    print(f"  Final Position Error:  {pos_error[-1]:.2f} m")
    print(f"  Final Position 1σ:     {final_sigma:.2f} m")
    print(f"  Final Yaw Error:       {yaw_error_deg[-1]:.2f}°")
    print(f"  Max | ||q|| - 1 |:     {quat_norm_dev:.2e}")
    print()
    print(f"Figures saved to: {figs_dir}/")
    print("=" * 60)
    print()


if __name__ == "__main__":
    main()
